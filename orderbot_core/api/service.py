"""对外 API 服务模块。

提供简化的函数接口供上层应用调用，内部复用同一个默认客户端。
"""

from typing import Optional

from orderbot_core.clients import OrderBotClient, create_client
from orderbot_core.domain.exceptions import EncodingError, OrderBotError, ProtocolError, TransportError
from orderbot_core.domain.models import ConversationThread, FileSource, ServiceResponse


GENERIC_ERROR_MESSAGE = "Sorry, I encountered an error processing your request. Please try again."

_client: Optional[OrderBotClient] = None


def get_default_client() -> OrderBotClient:
    """获取默认的下单客户端实例（单例）。"""
    global _client
    if _client is None:
        _client = create_client()
    return _client


def send_text_message(text: str, thread_id: Optional[ConversationThread] = None) -> ServiceResponse:
    return get_default_client().send_text_message(text, thread_id)


def send_voice_message(audio: FileSource, thread_id: Optional[ConversationThread] = None) -> ServiceResponse:
    return get_default_client().send_voice_message(audio, thread_id)


def send_image_message(image: FileSource, thread_id: Optional[ConversationThread] = None) -> ServiceResponse:
    return get_default_client().send_image_message(image, thread_id)


def describe_error(exc: BaseException) -> dict:
    """把异常映射为界面可用的提示信息。

    Returns:
        包含 kind、code、retryable、attempts、http_status 与 message 的字典；
        message 始终是统一的“请重试”提示，细节留给日志。
    """

    info = {
        "kind": "unknown",
        "code": None,
        "retryable": False,
        "attempts": None,
        "http_status": None,
        "message": GENERIC_ERROR_MESSAGE,
    }
    if isinstance(exc, OrderBotError):
        info["code"] = exc.code
        info["http_status"] = exc.http_status
    if isinstance(exc, TransportError):
        info.update(kind="transport", retryable=True, attempts=exc.attempts)
    elif isinstance(exc, ProtocolError):
        info["kind"] = "protocol"
    elif isinstance(exc, EncodingError):
        info["kind"] = "encoding"
    return info
