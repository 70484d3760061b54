from arcade.core.event.bus import EventBus
from arcade.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
    listener_identifier,
)

__all__ = [
    "EventBus",
    "CallbackType",
    "EventListener",
    "EventPayload",
    "ListenerPriority",
    "listener_identifier",
]
