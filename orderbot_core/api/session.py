"""聊天会话：会话线程的持有者。

传输层和客户端都是无状态的，线程 ID 的生命周期（新建 / 继续 / 重置）
由这里管理：首个响应带回的 thread_id 被采用后，在调用
start_new_conversation() 之前保持不变，并随每次提交一起发送。
"""

from typing import Optional

from orderbot_core.clients.base import OrderSubmitter
from orderbot_core.domain.models import (
    AudioPayload,
    ConversationThread,
    FileSource,
    ImagePayload,
    OutboundPayload,
    Product,
    ServiceResponse,
    TextPayload,
)
from orderbot_core.infrastructure.logging.logger import logger


QUANTITY_SELECTION = "quantity_selection"


class OrderChatSession:
    """一次下单对话。

    Args:
        client: 任意满足 OrderSubmitter 协议的客户端。
        thread_id: 继续已有对话时传入；为空表示新对话。
    """

    def __init__(self, client: OrderSubmitter, thread_id: Optional[ConversationThread] = None):
        self._client = client
        self._thread_id = thread_id
        self._last_response: Optional[ServiceResponse] = None
        self._selected_product: Optional[Product] = None

    @property
    def thread_id(self) -> Optional[ConversationThread]:
        return self._thread_id

    @property
    def last_response(self) -> Optional[ServiceResponse]:
        return self._last_response

    @property
    def selected_product(self) -> Optional[Product]:
        return self._selected_product

    # ---- 基础输入 ----

    def send_text(self, text: str) -> Optional[ServiceResponse]:
        """发送文本；空白输入直接忽略并返回 None。"""
        if not text or not text.strip():
            return None
        return self._send(TextPayload(text.strip()))

    def send_voice(self, audio: FileSource) -> ServiceResponse:
        return self._send(AudioPayload(audio))

    def send_image(self, image: FileSource) -> ServiceResponse:
        return self._send(ImagePayload(image))

    # ---- 下单流程中的快捷回复 ----

    def select_product(self, product: Product) -> Optional[ServiceResponse]:
        """选择商品。

        助手正在询问数量（intent 为 quantity_selection）时只记录所选商品、
        不发送任何消息，返回 None，随后由 confirm_quantity 回复数量；
        其他情况下发送 "I want to buy this: <name>"。
        """
        if self._last_response is not None and self._last_response.assistant.intent == QUANTITY_SELECTION:
            self._selected_product = product
            return None
        return self.send_text(f"I want to buy this: {product.name}")

    def confirm_quantity(self, quantity: int) -> Optional[ServiceResponse]:
        if quantity < 1:
            raise ValueError("quantity must be >= 1")
        self._selected_product = None
        return self.send_text(f"{quantity} units")

    def confirm_address(self, address: str) -> Optional[ServiceResponse]:
        return self.send_text(address)

    def place_order(self) -> Optional[ServiceResponse]:
        return self.send_text("place my order")

    def start_new_conversation(self) -> None:
        """丢弃当前线程，下一次提交开启新对话。"""
        self._thread_id = None
        self._last_response = None
        self._selected_product = None

    # ---- 内部 ----

    def _send(self, payload: OutboundPayload) -> ServiceResponse:
        try:
            response = self._client.submit(payload, self._thread_id)
        except Exception as e:
            logger.error(f"Order chat failed: {e}", extra={"extra": {
                "thread_id": self._thread_id,
                "input_type": payload.input_type,
                "error": str(e),
            }})
            raise
        if response.thread_id and not self._thread_id:
            self._thread_id = response.thread_id
            logger.info("Thread ID captured", extra={"extra": {"thread_id": response.thread_id}})
        self._last_response = response
        return response
