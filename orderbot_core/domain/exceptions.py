"""统一业务异常模型。

下单服务客户端对外只抛出 OrderBotError 的子类，调用方（聊天界面等）
可以按 code / attempts / http_status 做提示映射，而不必解析错误字符串。
"""

from typing import Optional


class OrderBotError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "RETRIES_EXHAUSTED"）。
        message: 可读错误信息。
        http_status: 关联的 HTTP 状态码（无则为 None）。
        extra: 其他补充字段（例如 input_type、url 等）。
    """

    def __init__(self, code: str, message: str, http_status: Optional[int] = None, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class TransportError(OrderBotError):
    """网络层错误在重试耗尽后抛出（连接失败、超时、5xx）。

    - last_error: 最后一次尝试的底层异常。
    - attempts: 实际发起的尝试次数（首发 + 重试）。
    """

    def __init__(
        self,
        code: str,
        message: str,
        last_error: Optional[BaseException] = None,
        attempts: int = 0,
        http_status: Optional[int] = None,
        **extra,
    ):
        super().__init__(code=code, message=message, http_status=http_status, **extra)
        self.last_error = last_error
        self.attempts = attempts


class ProtocolError(OrderBotError):
    """致命的协议错误：4xx、非法请求或响应体无法解码，不会重试。"""

    def __init__(
        self,
        code: str,
        message: str,
        http_status: Optional[int] = None,
        body: Optional[str] = None,
        **extra,
    ):
        super().__init__(code=code, message=message, http_status=http_status, **extra)
        self.body = body


class EncodingError(OrderBotError):
    """请求体编码失败（缺少文本或文件不可读），在任何网络调用之前抛出。"""


class ConfigError(OrderBotError):
    """重试策略或配置项不合法。"""
