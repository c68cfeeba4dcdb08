"""下单客户端抽象接口。

上层（聊天会话、界面）不直接依赖 HTTP 细节，而是依赖此协议：
提交一个 OutboundPayload 与可选的会话线程，得到 ServiceResponse。
测试或离线演示可以提供任意满足该协议的实现。
"""

from typing import Optional, Protocol

from orderbot_core.domain.models import ConversationThread, OutboundPayload, ServiceResponse


class OrderSubmitter(Protocol):
    """下单服务客户端协议。"""

    def submit(self, payload: OutboundPayload, thread: Optional[ConversationThread] = None) -> ServiceResponse:
        ...
