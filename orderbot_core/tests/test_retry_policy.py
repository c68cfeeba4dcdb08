import httpx
import pytest

from orderbot_core.domain.exceptions import ConfigError, EncodingError, ProtocolError
from orderbot_core.transport.policy import RetryPolicy, default_is_retryable

from conftest import SettingsStub


def test_default_delays_double_from_one_second():
    policy = RetryPolicy()
    assert [policy.delay_for(k) for k in (1, 2, 3)] == [1.0, 2.0, 4.0]


def test_delays_are_capped_and_non_decreasing():
    policy = RetryPolicy(max_retries=8, base_delay=1.0, max_delay=10.0)
    delays = [policy.delay_for(k) for k in range(1, 9)]
    assert delays == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0, 10.0, 10.0]
    assert delays == sorted(delays)


def test_delay_for_rejects_initial_attempt():
    with pytest.raises(ValueError):
        RetryPolicy().delay_for(0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_retries": -1},
        {"base_delay": 0},
        {"base_delay": 5.0, "max_delay": 1.0},
    ],
)
def test_invalid_policy_raises_config_error(kwargs):
    with pytest.raises(ConfigError) as exc_info:
        RetryPolicy(**kwargs)
    assert exc_info.value.code == "INVALID_CONFIG"


def test_policy_is_immutable():
    policy = RetryPolicy()
    with pytest.raises(AttributeError):
        policy.max_retries = 5


def test_policy_from_settings():
    stub = SettingsStub()
    stub.max_retries = 2
    stub.retry_base_delay = 0.5
    stub.retry_max_delay = 3.0
    policy = RetryPolicy.from_settings(stub)
    assert policy.max_retries == 2
    assert [policy.delay_for(k) for k in (1, 2)] == [0.5, 1.0]


@pytest.mark.parametrize(
    "error",
    [
        httpx.ConnectError("connection refused"),
        httpx.ConnectError("[Errno -2] Name or service not known"),
        httpx.ReadTimeout("timed out"),
        httpx.ConnectTimeout("timed out"),
        httpx.ReadError("connection reset"),
        httpx.RemoteProtocolError("server disconnected"),
        ProtocolError(code="HTTP_STATUS", message="boom", http_status=500),
        ProtocolError(code="HTTP_STATUS", message="boom", http_status=503),
        ProtocolError(code="HTTP_STATUS", message="boom", http_status=599),
    ],
)
def test_transient_errors_are_retryable(error):
    assert default_is_retryable(error) is True


@pytest.mark.parametrize(
    "error",
    [
        ProtocolError(code="HTTP_STATUS", message="nope", http_status=400),
        ProtocolError(code="HTTP_STATUS", message="nope", http_status=404),
        ProtocolError(code="HTTP_STATUS", message="nope", http_status=429),
        ProtocolError(code="HTTP_STATUS", message="nope", http_status=600),
        ProtocolError(code="DECODE_ERROR", message="bad json"),
        httpx.UnsupportedProtocol("ftp://"),
        EncodingError(code="EMPTY_TEXT", message="empty"),
        ValueError("bug"),
    ],
)
def test_other_errors_are_fatal(error):
    assert default_is_retryable(error) is False


def test_rate_limit_is_retryable_only_when_enabled():
    error = ProtocolError(code="HTTP_STATUS", message="slow down", http_status=429)
    assert RetryPolicy().should_retry(error) is False
    assert RetryPolicy(retry_on_rate_limit=True).should_retry(error) is True


def test_custom_predicate_overrides_default():
    policy = RetryPolicy(is_retryable=lambda e: isinstance(e, KeyError))
    assert policy.should_retry(KeyError("x")) is True
    assert policy.should_retry(httpx.ConnectError("refused")) is False
