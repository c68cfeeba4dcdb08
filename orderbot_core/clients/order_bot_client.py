"""下单服务客户端。

本模块负责：

1. 接收统一的 OutboundPayload（文本 / 语音 / 图片）与可选会话线程。
2. 将其编码为 POST {base_url}/order/ 的 multipart 请求。
3. 交给共享的 RetryingTransport 执行（含自动重试）。
4. 将响应 JSON 解析为统一的 ServiceResponse。

客户端本身不保存跨调用状态：服务端返回的 thread_id 由调用方决定是否采用。
"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from orderbot_core.clients.encoding import encode_payload
from orderbot_core.config.settings import settings
from orderbot_core.domain.exceptions import ProtocolError
from orderbot_core.domain.models import (
    AssistantResponse,
    AudioPayload,
    ConversationThread,
    FileSource,
    ImagePayload,
    OutboundPayload,
    Product,
    RequestDescriptor,
    ServiceResponse,
    TextPayload,
)
from orderbot_core.infrastructure.logging.logger import logger
from orderbot_core.transport.policy import RetryPolicy
from orderbot_core.transport.retrying import RetryingTransport


ORDER_PATH = "/order/"


class OrderBotClient:
    """下单服务客户端实现。

    - submit / submit_async: 对外统一调用入口，返回 ServiceResponse。
    - send_*_message: 与原有 App 接口同名的便捷方法。
    """

    def __init__(self, cfg=settings, transport: Optional[RetryingTransport] = None):
        self._settings = cfg
        self._transport = transport or RetryingTransport(RetryPolicy.from_settings(cfg))

    @property
    def transport(self) -> RetryingTransport:
        return self._transport

    # ---- 提交 ----

    def submit(self, payload: OutboundPayload, thread: Optional[ConversationThread] = None) -> ServiceResponse:
        """编码并提交一次输入。

        Raises:
            EncodingError: 载荷缺少必要数据，未发起任何网络请求。
            ProtocolError: 4xx 或响应无法解码。
            TransportError: 网络错误 / 超时 / 5xx 在重试耗尽后仍失败。
        """

        request = self.build_request(payload, thread)
        self._log_submit(payload, thread, request)
        return self._transport.execute(request, self._parse_response)

    async def submit_async(
        self, payload: OutboundPayload, thread: Optional[ConversationThread] = None
    ) -> ServiceResponse:
        # 读取本地文件放到线程池，避免大文件阻塞事件循环
        request = await asyncio.to_thread(self.build_request, payload, thread)
        self._log_submit(payload, thread, request)
        return await self._transport.execute_async(request, self._parse_response)

    def send_text_message(self, text: str, thread_id: Optional[ConversationThread] = None) -> ServiceResponse:
        return self.submit(TextPayload(text), thread_id)

    def send_voice_message(self, audio: FileSource, thread_id: Optional[ConversationThread] = None) -> ServiceResponse:
        return self.submit(AudioPayload(audio), thread_id)

    def send_image_message(self, image: FileSource, thread_id: Optional[ConversationThread] = None) -> ServiceResponse:
        return self.submit(ImagePayload(image), thread_id)

    # ---- 请求构造 ----

    def build_request(
        self, payload: OutboundPayload, thread: Optional[ConversationThread] = None
    ) -> RequestDescriptor:
        """将载荷转成 RequestDescriptor；编码失败时不会产生任何网络调用。"""

        parts = encode_payload(payload, thread)
        # 语音/图片体积更大、服务端处理更久，超时放宽
        if isinstance(payload, TextPayload):
            timeout = self._settings.text_timeout
        else:
            timeout = self._settings.media_timeout
        return RequestDescriptor(
            url=f"{self._settings.base_url}{ORDER_PATH}",
            parts=parts,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    # ---- 响应解析 ----

    def _parse_response(self, resp: httpx.Response) -> ServiceResponse:
        try:
            data = resp.json()
        except ValueError as e:
            raise ProtocolError(
                code="DECODE_ERROR",
                message="Order service response is not valid JSON",
                http_status=resp.status_code,
                body=resp.text,
            ) from e
        result = parse_service_response(data)
        if result is None:
            raise ProtocolError(
                code="DECODE_ERROR",
                message="Order service response is missing assistant_response",
                http_status=resp.status_code,
                body=resp.text,
            )
        logger.debug(
            "Order response decoded",
            extra={"extra": {
                "intent": result.assistant.intent,
                "next_step": result.assistant.next_step,
                "has_thread": result.thread_id is not None,
            }},
        )
        return result

    @staticmethod
    def _log_submit(payload: OutboundPayload, thread: Optional[str], request: RequestDescriptor) -> None:
        logger.info(
            f"Submitting {payload.input_type} message",
            extra={"extra": {
                "input_type": payload.input_type,
                "has_thread": bool(thread),
                "timeout": request.timeout,
            }},
        )


def parse_service_response(data: Any) -> Optional[ServiceResponse]:
    """将服务端原始 JSON 解析为 ServiceResponse。

    只要求顶层是对象且 assistant_response 是对象，其余字段按原样透传；
    结构不符合时返回 None，由调用方转成 ProtocolError。
    """

    if not isinstance(data, dict):
        return None
    assistant_raw = data.get("assistant_response")
    if not isinstance(assistant_raw, dict):
        return None
    thread_id = data.get("thread_id")
    return ServiceResponse(
        order_text=str(data.get("order_text") or ""),
        thread_id=str(thread_id) if thread_id else None,
        assistant=_build_assistant(assistant_raw),
        raw=data,
    )


def _build_assistant(payload: Dict[str, Any]) -> AssistantResponse:
    products_raw = payload.get("products")
    products: Optional[List[Product]] = None
    if isinstance(products_raw, list):
        products = [_build_product(p) for p in products_raw if isinstance(p, dict)]
    product_raw = payload.get("product")
    return AssistantResponse(
        intent=str(payload.get("intent") or ""),
        next_step=str(payload.get("next_step") or ""),
        message=payload.get("message"),
        products=products,
        product=_build_product(product_raw) if isinstance(product_raw, dict) else None,
        quantity=_as_int(payload.get("quantity")),
        total=_as_str(payload.get("total")),
        address=payload.get("address"),
    )


def _build_product(payload: Dict[str, Any]) -> Product:
    return Product(
        name=str(payload.get("name") or ""),
        description=str(payload.get("description") or ""),
        quantity_or_weight=str(payload.get("quantity_or_weight") or ""),
        price=_as_str(payload.get("price")),
        available_quantity=_as_str(payload.get("available_quantity")),
        quantity=_as_int(payload.get("quantity")),
    )


def _as_int(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError, OverflowError):
        return None


def _as_str(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    return str(raw)
