"""HTTP 传输层。

- policy.py: 重试策略与错误分类
- retrying.py: 带指数退避的请求执行器
"""

from orderbot_core.transport.policy import DEFAULT_POLICY, RetryPolicy, default_is_retryable
from orderbot_core.transport.retrying import RetryEvent, RetryingTransport

__all__ = [
    "DEFAULT_POLICY",
    "RetryPolicy",
    "default_is_retryable",
    "RetryEvent",
    "RetryingTransport",
]
