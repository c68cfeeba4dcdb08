import pytest

from orderbot_core.api.session import OrderChatSession
from orderbot_core.clients.order_bot_client import parse_service_response
from orderbot_core.domain.exceptions import TransportError
from orderbot_core.domain.models import AudioPayload, ImagePayload, Product, TextPayload

from conftest import order_body


class RecordingClient:
    def __init__(self, thread_ids=("thread-1",), intent="product_inquiry"):
        self.calls = []
        self._thread_ids = list(thread_ids)
        self.intent = intent

    def submit(self, payload, thread=None):
        self.calls.append((payload, thread))
        thread_id = self._thread_ids.pop(0) if self._thread_ids else "server-thread"
        return parse_service_response(order_body(thread_id=thread_id, intent=self.intent))


def test_first_response_thread_is_adopted():
    client = RecordingClient()
    session = OrderChatSession(client)
    session.send_text("order 2 apples")
    session.send_text("continue")
    assert client.calls[0] == (TextPayload("order 2 apples"), None)
    assert client.calls[1] == (TextPayload("continue"), "thread-1")
    assert session.thread_id == "thread-1"


def test_thread_is_not_replaced_once_established():
    client = RecordingClient(thread_ids=["thread-1", "thread-2", "thread-3"])
    session = OrderChatSession(client)
    session.send_text("a")
    session.send_text("b")
    session.send_text("c")
    assert [thread for _, thread in client.calls] == [None, "thread-1", "thread-1"]
    assert session.thread_id == "thread-1"


def test_existing_thread_is_forwarded():
    client = RecordingClient()
    session = OrderChatSession(client, thread_id="abc123")
    session.send_voice(b"voice")
    session.send_image(b"jpeg")
    assert client.calls == [(AudioPayload(b"voice"), "abc123"), (ImagePayload(b"jpeg"), "abc123")]


def test_start_new_conversation_resets_thread():
    client = RecordingClient(thread_ids=["thread-1", "thread-2"])
    session = OrderChatSession(client)
    session.send_text("a")
    session.start_new_conversation()
    assert session.thread_id is None
    assert session.last_response is None
    session.send_text("b")
    assert client.calls[1][1] is None
    assert session.thread_id == "thread-2"


def test_blank_text_is_ignored():
    client = RecordingClient()
    session = OrderChatSession(client)
    assert session.send_text("   ") is None
    assert client.calls == []


def test_shortcut_replies():
    client = RecordingClient()
    session = OrderChatSession(client)
    session.select_product(Product(name="Apple"))
    session.confirm_quantity(3)
    session.confirm_address("  12 Main St  ")
    session.place_order()
    texts = [payload.text for payload, _ in client.calls]
    assert texts == ["I want to buy this: Apple", "3 units", "12 Main St", "place my order"]


def test_select_product_while_asking_quantity_sends_nothing():
    client = RecordingClient(intent="quantity_selection")
    session = OrderChatSession(client)
    session.send_text("I want milk")
    assert session.select_product(Product(name="Milk")) is None
    assert len(client.calls) == 1
    assert session.selected_product == Product(name="Milk")
    session.confirm_quantity(2)
    assert [payload.text for payload, _ in client.calls] == ["I want milk", "2 units"]
    assert session.selected_product is None


def test_selection_is_cleared_by_new_conversation():
    session = OrderChatSession(RecordingClient(intent="quantity_selection"))
    session.send_text("I want milk")
    session.select_product(Product(name="Milk"))
    session.start_new_conversation()
    assert session.selected_product is None


def test_confirm_quantity_rejects_zero():
    session = OrderChatSession(RecordingClient())
    with pytest.raises(ValueError):
        session.confirm_quantity(0)


def test_errors_propagate_and_keep_thread():
    class FailingClient:
        def submit(self, payload, thread=None):
            raise TransportError(code="RETRIES_EXHAUSTED", message="down", attempts=4)

    session = OrderChatSession(FailingClient(), thread_id="abc123")
    with pytest.raises(TransportError):
        session.send_text("hi")
    assert session.thread_id == "abc123"
    assert session.last_response is None
