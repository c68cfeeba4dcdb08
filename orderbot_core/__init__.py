"""OrderBot Core 顶层包。

该包提供聊天下单客户端的请求分发核心，包括配置加载、领域模型、
multipart 编码、带指数退避的重试传输层以及会话级的便捷封装。
"""

from orderbot_core.api.session import OrderChatSession
from orderbot_core.clients import OrderBotClient, create_client
from orderbot_core.domain.exceptions import (
    ConfigError,
    EncodingError,
    OrderBotError,
    ProtocolError,
    TransportError,
)
from orderbot_core.domain.models import AudioPayload, ImagePayload, ServiceResponse, TextPayload
from orderbot_core.transport import RetryEvent, RetryingTransport, RetryPolicy

__all__ = [
    "OrderChatSession",
    "OrderBotClient",
    "create_client",
    "ConfigError",
    "EncodingError",
    "OrderBotError",
    "ProtocolError",
    "TransportError",
    "AudioPayload",
    "ImagePayload",
    "ServiceResponse",
    "TextPayload",
    "RetryEvent",
    "RetryingTransport",
    "RetryPolicy",
]
