"""
Event bus value types.

Payloads are plain dicts such as ``{"player_id": "p1", "avatar_id": "neon_fox",
"price": 300, "new_balance": 0}`` for ``shop.avatar_purchased``. Listeners run
in ascending ``ListenerPriority`` order; registration order breaks ties.

Listeners in this package
-------------------------
- ``ChallengeService.on_score_recorded`` (NORMAL) advances daily challenges
  from ``score.recorded``
- Tests subscribe at every level to observe ordering and error isolation
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Awaitable, Callable, Optional, Union

EventPayload = dict[str, Any]

CallbackType = Union[
    Callable[[EventPayload], Any],
    Callable[[EventPayload], Awaitable[Any]],
]


class ListenerPriority(IntEnum):
    """Lower runs first."""

    CRITICAL = 0  # state other listeners read, e.g. progression counters
    HIGH = 10
    NORMAL = 50
    LOW = 100  # audit and analytics sinks


def listener_identifier(event_name: str, callback: CallbackType) -> str:
    """Default identifier: ``<module>.<qualname>@<event>``."""
    module = getattr(callback, "__module__", None) or "unknown"
    name = getattr(callback, "__qualname__", None) or getattr(callback, "__name__", "callback")
    return f"{module}.{name}@{event_name}"


@dataclass(slots=True, frozen=True)
class EventListener:
    """A subscription; ``once`` listeners are dropped from the registry before they run."""

    callback: CallbackType
    priority: ListenerPriority
    identifier: str
    once: bool = False

    @classmethod
    def build(
        cls,
        event_name: str,
        callback: CallbackType,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> EventListener:
        return cls(
            callback=callback,
            priority=priority,
            identifier=identifier or listener_identifier(event_name, callback),
            once=once,
        )
