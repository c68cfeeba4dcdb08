"""重试策略。

RetryPolicy 是不可变配置：构造后只读，可以在并发的多次提交之间共享。
退避时间按指数增长并受上限约束：

    第 k 次重试前等待 min(base_delay * 2 ** (k - 1), max_delay)

默认 max_retries=3, base_delay=1s, max_delay=10s，即等待 1s、2s、4s 后放弃。
"""

from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from orderbot_core.domain.exceptions import ConfigError, ProtocolError


RetryPredicate = Callable[[BaseException], bool]


def default_is_retryable(error: BaseException, retry_on_rate_limit: bool = False) -> bool:
    """判断一次失败是否值得重试。

    可重试：超时、连接被拒/DNS 失败/读写中断等网络错误，以及 5xx。
    其余（4xx、非法请求、响应解码失败）一律视为致命错误。
    """

    if isinstance(error, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)):
        return True
    if isinstance(error, ProtocolError) and error.http_status is not None:
        if 500 <= error.http_status <= 599:
            return True
        return retry_on_rate_limit and error.http_status == 429
    return False


@dataclass(frozen=True)
class RetryPolicy:
    """单个逻辑请求的重试配置。

    - max_retries: 首发之外最多重试几次。
    - base_delay / max_delay: 退避等待的起点与上限（秒）。
    - retry_on_rate_limit: 是否把 429 当作可重试错误。
    - is_retryable: 自定义分类函数；为空时使用 default_is_retryable。
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    retry_on_rate_limit: bool = False
    is_retryable: Optional[RetryPredicate] = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigError(code="INVALID_CONFIG", message="max_retries must be >= 0")
        if self.base_delay <= 0:
            raise ConfigError(code="INVALID_CONFIG", message="base_delay must be > 0")
        if self.max_delay < self.base_delay:
            raise ConfigError(code="INVALID_CONFIG", message="max_delay must be >= base_delay")

    @classmethod
    def from_settings(cls, cfg) -> "RetryPolicy":
        return cls(
            max_retries=cfg.max_retries,
            base_delay=cfg.retry_base_delay,
            max_delay=cfg.retry_max_delay,
            retry_on_rate_limit=cfg.retry_on_rate_limit,
        )

    def should_retry(self, error: BaseException) -> bool:
        if self.is_retryable is not None:
            return self.is_retryable(error)
        return default_is_retryable(error, retry_on_rate_limit=self.retry_on_rate_limit)

    def delay_for(self, retry_number: int) -> float:
        """第 retry_number 次重试（从 1 开始）之前的等待秒数。"""

        if retry_number < 1:
            raise ValueError("retry_number starts at 1")
        return min(self.base_delay * 2 ** (retry_number - 1), self.max_delay)


DEFAULT_POLICY = RetryPolicy()
