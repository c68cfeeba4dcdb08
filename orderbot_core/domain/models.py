"""下单服务的请求与响应数据模型。

本模块定义了客户端与传输层之间共享的标准数据结构：

- OutboundPayload: 一次提交的输入，Text / Audio / Image 三选一。
- RequestDescriptor: 传给 RetryingTransport 的完整请求描述。
- RequestAttempt: 单次尝试的瞬时信息，只存在于一次 execute 调用内。
- ServiceResponse: 从服务端 JSON 解析出的统一响应结果。

会话线程 ID（ConversationThread）由调用方持有，这里只定义类型别名，
传输层与客户端都只负责原样转发。
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Literal, Optional, Tuple, Union


# 服务端分配的会话线程标识，对核心层而言是不透明字符串
ConversationThread = str

# 表单字段中 input_type 的取值
InputType = Literal["text", "audio", "image"]

# 本地文件路径、原始字节或可读的二进制文件对象
FileSource = Union[str, Path, bytes, BinaryIO]


@dataclass(frozen=True)
class TextPayload:
    """纯文本输入。"""

    text: str

    input_type: InputType = field(default="text", init=False)


@dataclass(frozen=True)
class AudioPayload:
    """语音输入，默认按 mp3 上传。"""

    source: FileSource
    mime_type: str = "audio/mp3"
    filename: str = "voice_message.mp3"

    input_type: InputType = field(default="audio", init=False)


@dataclass(frozen=True)
class ImagePayload:
    """图片输入，默认按 jpeg 上传。"""

    source: FileSource
    mime_type: str = "image/jpeg"
    filename: str = "image.jpg"

    input_type: InputType = field(default="image", init=False)


OutboundPayload = Union[TextPayload, AudioPayload, ImagePayload]


# httpx files 参数中的单个部件：普通字段为 (None, 值)，文件为 (文件名, 字节, MIME 类型)
FormPart = Tuple[str, Tuple[Any, ...]]


@dataclass(frozen=True)
class RequestDescriptor:
    """一次逻辑请求的完整描述，重试时原样复用。

    - url: 目标地址（已拼好 /order/）。
    - parts: multipart 表单部件，按发送顺序排列。
    - headers: 额外请求头；Content-Type 由 httpx 根据 boundary 自动生成。
    - timeout: 单次尝试的超时秒数（不是累计超时）。
    """

    url: str
    parts: Tuple[FormPart, ...]
    timeout: float
    headers: Dict[str, str] = field(default_factory=dict)

    def field_names(self) -> List[str]:
        return [name for name, _ in self.parts]


@dataclass(frozen=True)
class RequestAttempt:
    """单次尝试：attempt_number 从 0 开始计数，0 表示首发请求。"""

    attempt_number: int
    started_at: datetime


@dataclass
class Product:
    """服务端返回的商品条目，字段均按原样透传。"""

    name: str
    description: str = ""
    quantity_or_weight: str = ""
    price: Optional[str] = None
    available_quantity: Optional[str] = None
    quantity: Optional[int] = None


@dataclass
class AssistantResponse:
    """助手回复部分。intent 决定界面如何渲染，对核心层而言是不透明的。"""

    intent: str
    next_step: str = ""
    message: Optional[str] = None
    products: Optional[List[Product]] = None
    product: Optional[Product] = None
    quantity: Optional[int] = None
    total: Optional[str] = None
    address: Optional[str] = None


@dataclass
class ServiceResponse:
    """一次提交的最终结果。

    - order_text: 服务端识别出的订单文本（语音/图片会被转成文字）。
    - thread_id: 服务端分配的会话线程，首轮对话后由调用方保存。
    - assistant: 助手回复。
    - raw: 原始响应 JSON，用于调试或日志记录。
    """

    order_text: str
    assistant: AssistantResponse
    thread_id: Optional[ConversationThread] = None
    raw: Optional[Dict[str, Any]] = None
