"""下单服务客户端层。

该包下的模块负责：
- 定义客户端抽象接口 (base)。
- 把输入载荷编码为 multipart 表单 (encoding)。
- 提供面向下单服务的具体实现 (order_bot_client)。
"""

from typing import Optional

from orderbot_core.clients.base import OrderSubmitter
from orderbot_core.clients.order_bot_client import OrderBotClient
from orderbot_core.config.settings import settings
from orderbot_core.transport.policy import RetryPolicy
from orderbot_core.transport.retrying import RetryingTransport, RetryListener


def create_client(cfg=None, on_retry: Optional[RetryListener] = None) -> OrderBotClient:
    """根据配置创建客户端实例，默认取全局 settings。"""

    cfg = cfg or settings
    transport = RetryingTransport(RetryPolicy.from_settings(cfg), on_retry=on_retry)
    return OrderBotClient(cfg, transport=transport)


__all__ = ["OrderSubmitter", "OrderBotClient", "create_client"]
