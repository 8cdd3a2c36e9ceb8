"""Chat port: abstract interface for messaging Deal participants."""

from abc import ABC, abstractmethod


class ChatPort(ABC):
    """Abstract interface for chat adapters (bot messengers and the like)."""

    @abstractmethod
    def send(self, recipient_id: str, message: str) -> dict:
        """Send a message to a marketplace user.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
