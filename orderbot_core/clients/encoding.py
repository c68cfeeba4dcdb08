"""输入载荷 → multipart 表单部件。

编码是“全有或全无”的：文件内容在构造请求之前就被完整读出，
任何一个字段缺失都会在发起网络调用前抛出 EncodingError，
不会出现只发出部分字段的请求。
"""

from pathlib import Path
from typing import List, Optional, Tuple

from orderbot_core.domain.exceptions import EncodingError
from orderbot_core.domain.models import (
    AudioPayload,
    ConversationThread,
    FileSource,
    FormPart,
    ImagePayload,
    OutboundPayload,
    TextPayload,
)


def read_source(source: Optional[FileSource]) -> bytes:
    """把本地路径 / 字节 / 二进制文件对象统一读成 bytes。"""

    if source is None:
        raise EncodingError(code="MISSING_SOURCE", message="binary payload has no byte source")
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    elif isinstance(source, (str, Path)):
        path = Path(source).expanduser()
        try:
            data = path.read_bytes()
        except OSError as e:
            raise EncodingError(code="UNREADABLE_SOURCE", message=f"cannot read {path}: {e}") from e
    elif hasattr(source, "read"):
        try:
            data = source.read()
        except OSError as e:
            raise EncodingError(code="UNREADABLE_SOURCE", message=f"cannot read file object: {e}") from e
        if not isinstance(data, (bytes, bytearray)):
            raise EncodingError(
                code="UNREADABLE_SOURCE",
                message="file object must be opened in binary mode",
            )
        data = bytes(data)
    else:
        raise EncodingError(
            code="UNREADABLE_SOURCE",
            message=f"unsupported byte source type: {type(source).__name__}",
        )
    if not data:
        raise EncodingError(code="MISSING_SOURCE", message="binary payload is empty")
    return data


def _field(name: str, value: str) -> FormPart:
    # 文件名为 None 时 httpx 按普通表单字段编码
    return (name, (None, value))


def encode_payload(payload: OutboundPayload, thread: Optional[ConversationThread] = None) -> Tuple[FormPart, ...]:
    """按输入类型生成表单部件；thread 非空时追加 thread_id 字段。"""

    if isinstance(payload, TextPayload):
        if not isinstance(payload.text, str) or not payload.text.strip():
            raise EncodingError(code="EMPTY_TEXT", message="text payload is empty")
        parts: List[FormPart] = [_field("input_type", payload.input_type), _field("text", payload.text)]
        if thread:
            parts.append(_field("thread_id", thread))
        return tuple(parts)

    if isinstance(payload, (AudioPayload, ImagePayload)):
        data = read_source(payload.source)
        parts = [_field("input_type", payload.input_type)]
        if thread:
            parts.append(_field("thread_id", thread))
        parts.append(("file", (payload.filename, data, payload.mime_type)))
        return tuple(parts)

    raise EncodingError(
        code="UNSUPPORTED_PAYLOAD",
        message=f"unsupported payload type: {type(payload).__name__}",
    )
