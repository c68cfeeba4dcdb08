"""Minimal demonstration of an ordering conversation."""

from orderbot_core import OrderChatSession, OrderBotError, create_client
from orderbot_core.api.service import describe_error

if __name__ == "__main__":
    session = OrderChatSession(create_client(on_retry=lambda e: print(f"retry #{e.attempt_number} in {e.delay:.0f}s")))
    for text in ["I want to order 2 kg of apples", "2 units", "place my order"]:
        print("User:", text)
        try:
            reply = session.send_text(text)
        except OrderBotError as exc:
            print("Bot:", describe_error(exc)["message"])
            break
        print("Bot:", reply.assistant.message or "Response received", f"[{reply.assistant.intent}]")
    print("Thread:", session.thread_id)
