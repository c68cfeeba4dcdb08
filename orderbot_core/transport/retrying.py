"""带自动重试的 HTTP 传输层。

RetryingTransport 负责把一个 RequestDescriptor 发出去：

1. 第 0 次尝试立即发起。
2. 失败时用 RetryPolicy 判断是否可重试；致命错误立即抛给调用方。
3. 可重试且预算未用完时，按指数退避等待后原样重发。
4. 预算耗尽仍失败，抛出 TransportError（携带最后一次异常与尝试次数）。

尝试计数、开始时间等状态都只存在于一次 execute 调用的局部变量里，
因此同一个 RetryingTransport 可以被多个并发调用共享。
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, TypeVar

import httpx

from orderbot_core.domain.exceptions import OrderBotError, ProtocolError, TransportError
from orderbot_core.domain.models import RequestAttempt, RequestDescriptor
from orderbot_core.infrastructure.logging.logger import logger
from orderbot_core.transport.policy import DEFAULT_POLICY, RetryPolicy

T = TypeVar("T")

ResponseParser = Callable[[httpx.Response], T]


@dataclass(frozen=True)
class RetryEvent:
    """一次重试的观测事件，仅用于日志/统计，不影响请求结果。"""

    attempt_number: int
    delay: float
    error_class: str


RetryListener = Callable[[RetryEvent], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_status(resp: httpx.Response) -> httpx.Response:
    if 200 <= resp.status_code < 300:
        return resp
    raise ProtocolError(
        code="HTTP_STATUS",
        message=f"Order service returned HTTP {resp.status_code}",
        http_status=resp.status_code,
        body=resp.text,
    )


class RetryingTransport:
    """在有限次数内自动重试的请求执行器。

    - policy: 共享的不可变重试策略。
    - on_retry: 可选回调，每次重试前收到一个 RetryEvent。
    - sleep / async_sleep: 等待函数，测试中可替换为记录器。
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        on_retry: Optional[RetryListener] = None,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.policy = policy or DEFAULT_POLICY
        self._on_retry = on_retry
        self._sleep = sleep
        self._async_sleep = async_sleep

    # ---- 同步 ----

    def execute(self, request: RequestDescriptor, parse: ResponseParser) -> T:
        attempt_number = 0
        with httpx.Client(timeout=request.timeout, trust_env=False) as client:
            while True:
                attempt = RequestAttempt(attempt_number=attempt_number, started_at=_utcnow())
                self._log_attempt(request, attempt)
                try:
                    resp = client.post(request.url, files=list(request.parts), headers=request.headers)
                    return parse(_check_status(resp))
                except (httpx.HTTPError, ProtocolError) as exc:
                    delay = self._handle_failure(request, attempt, exc)
                self._sleep(delay)
                attempt_number += 1

    # ---- 异步 ----

    async def execute_async(self, request: RequestDescriptor, parse: ResponseParser) -> T:
        attempt_number = 0
        async with httpx.AsyncClient(timeout=request.timeout, trust_env=False) as client:
            while True:
                attempt = RequestAttempt(attempt_number=attempt_number, started_at=_utcnow())
                self._log_attempt(request, attempt)
                try:
                    resp = await client.post(request.url, files=list(request.parts), headers=request.headers)
                    return parse(_check_status(resp))
                except (httpx.HTTPError, ProtocolError) as exc:
                    delay = self._handle_failure(request, attempt, exc)
                # 挂起当前协程，不阻塞事件循环
                await self._async_sleep(delay)
                attempt_number += 1

    # ---- 辅助方法 ----

    def _handle_failure(self, request: RequestDescriptor, attempt: RequestAttempt, exc: Exception) -> float:
        """分类失败：返回下一次重试前的等待秒数，或直接抛出最终异常。"""

        error_class = type(exc).__name__
        elapsed = (_utcnow() - attempt.started_at).total_seconds()
        if not self.policy.should_retry(exc):
            logger.warning(
                f"Order request failed with fatal error: {exc}",
                extra={"extra": {
                    "url": request.url,
                    "attempt": attempt.attempt_number,
                    "error_class": error_class,
                    "http_status": getattr(exc, "http_status", None),
                    "elapsed": elapsed,
                }},
            )
            if isinstance(exc, OrderBotError):
                raise exc
            raise ProtocolError(code="INVALID_REQUEST", message=str(exc) or error_class) from exc

        if attempt.attempt_number >= self.policy.max_retries:
            attempts = attempt.attempt_number + 1
            logger.error(
                f"Order request failed after {attempts} attempts: {exc}",
                extra={"extra": {
                    "url": request.url,
                    "attempts": attempts,
                    "error_class": error_class,
                }},
            )
            raise TransportError(
                code="RETRIES_EXHAUSTED",
                message=f"Order service unreachable after {attempts} attempts: {exc}",
                last_error=exc,
                attempts=attempts,
                http_status=getattr(exc, "http_status", None),
            ) from exc

        retry_number = attempt.attempt_number + 1
        event = RetryEvent(
            attempt_number=retry_number,
            delay=self.policy.delay_for(retry_number),
            error_class=error_class,
        )
        self._emit(request, event)
        return event.delay

    def _emit(self, request: RequestDescriptor, event: RetryEvent) -> None:
        logger.warning(
            f"Retrying order request in {event.delay:.1f}s ({event.error_class})",
            extra={"extra": {
                "url": request.url,
                "attempt": event.attempt_number,
                "max_retries": self.policy.max_retries,
                "delay": event.delay,
                "error_class": event.error_class,
            }},
        )
        if self._on_retry is None:
            return
        try:
            self._on_retry(event)
        except Exception:
            # 观测回调失败不影响请求本身
            logger.exception("on_retry listener raised")

    @staticmethod
    def _log_attempt(request: RequestDescriptor, attempt: RequestAttempt) -> None:
        logger.debug(
            "Sending order request",
            extra={"extra": {
                "url": request.url,
                "attempt": attempt.attempt_number,
                "fields": request.field_names(),
                "timeout": request.timeout,
            }},
        )
