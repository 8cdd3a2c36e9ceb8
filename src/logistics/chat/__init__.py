"""Messenger used to reach transporters and shippers about their Deals.

``DealNotificationHandler`` is the only sender. Which messenger it talks to
is chosen once per process from ``CHAT_ADAPTER``; only the in-process
``fake`` messenger ships with RouteShare, and it records every message so
tests and local runs can inspect what each participant would have received.
"""

import importlib
import os

from logistics.chat.port import ChatPort

_ADAPTERS = {
    "fake": "logistics.chat.fake_adapter:FakeChat",
}

_chat: ChatPort | None = None


def _load_adapter(name: str) -> ChatPort:
    try:
        target = _ADAPTERS[name]
    except KeyError:
        raise ValueError(f"Unknown chat adapter: {name}. Known adapters: {', '.join(sorted(_ADAPTERS))}") from None

    module_name, class_name = target.split(":")
    module = importlib.import_module(module_name)
    return getattr(module, class_name)()


def get_chat() -> ChatPort:
    """The messenger Deal participants are notified through."""
    global _chat
    if _chat is None:
        _chat = _load_adapter(os.environ.get("CHAT_ADAPTER", "fake"))
    return _chat


def reset_chat() -> None:
    """Forget the current messenger; the next ``get_chat`` picks one again."""
    global _chat
    _chat = None
