import json
import os
import tempfile

import pytest

# 日志写到临时目录，避免测试在工作目录生成 logs/
os.environ.setdefault("ORDERBOT_LOG_DIR", tempfile.mkdtemp(prefix="orderbot-logs-"))


class SettingsStub:
    base_url = "http://orderbot.test"
    text_timeout = 10.0
    media_timeout = 15.0
    max_retries = 3
    retry_base_delay = 1.0
    retry_max_delay = 10.0
    retry_on_rate_limit = False


class Resp:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self):
        if self._payload is not None:
            return self._payload
        return json.loads(self.text)


def order_body(thread_id="thread-1", intent="product_inquiry"):
    return {
        "order_text": "order 2 apples",
        "thread_id": thread_id,
        "assistant_response": {
            "intent": intent,
            "message": "Here are the apples we have",
            "products": [
                {
                    "name": "Apple",
                    "description": "Fresh red apples",
                    "price": "1.20",
                    "available_quantity": "40",
                    "quantity_or_weight": "1 kg",
                }
            ],
            "next_step": "quantity_selection",
        },
    }


class FakeHttp:
    """按顺序返回预设结果（响应或异常）的 httpx 替身。"""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.client_kwargs = []

    def _next(self, url, kwargs):
        self.calls.append({"url": url, **kwargs})
        if not self.outcomes:
            raise AssertionError("unexpected extra request")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def client_class(self):
        fake = self

        class Client:
            def __init__(self, *a, **kw):
                fake.client_kwargs.append(kw)

            def __enter__(self):
                return self

            def __exit__(self, *a):
                return False

            def post(self, url, **kw):
                return fake._next(url, kw)

        return Client

    def async_client_class(self):
        fake = self

        class AsyncClient:
            def __init__(self, *a, **kw):
                fake.client_kwargs.append(kw)

            async def __aenter__(self):
                return self

            async def __aexit__(self, *a):
                return False

            async def post(self, url, **kw):
                return fake._next(url, kw)

        return AsyncClient

    def fields(self, call_index=0):
        """把第 call_index 次请求的 files 参数整理成 {字段名: 部件}。"""
        return {name: part for name, part in self.calls[call_index]["files"]}


@pytest.fixture
def fake_http(monkeypatch):
    def install(*outcomes):
        fake = FakeHttp(outcomes)
        monkeypatch.setattr("httpx.Client", fake.client_class())
        monkeypatch.setattr("httpx.AsyncClient", fake.async_client_class())
        return fake

    return install


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def settings_stub():
    return SettingsStub()
