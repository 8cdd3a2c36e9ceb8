"""Fake chat adapter: records sent messages for testing."""

from uuid import uuid4

from logistics.chat.port import ChatPort


class FakeChat(ChatPort):
    """Chat adapter that keeps messages in memory for test assertions."""

    def __init__(self):
        self.sent_messages: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Chat delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Chat delivery failed"):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, recipient_id: str, message: str) -> dict:
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"chat-{uuid4().hex[:12]}"
        self.sent_messages.append({"message_id": message_id, "recipient_id": recipient_id, "message": message})
        return {"message_id": message_id, "status": "sent"}

    def messages_for(self, recipient_id: str) -> list[str]:
        return [m["message"] for m in self.sent_messages if m["recipient_id"] == recipient_id]

    def reset(self):
        """Clear sent messages (useful between tests)."""
        self.sent_messages.clear()
        self.should_succeed = True
        self.failure_reason = "Chat delivery failed"
