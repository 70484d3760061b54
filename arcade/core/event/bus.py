"""
Arcade EventBus: in-process async publish/subscribe.

Purpose
-------
Decouple services from side effects (audit, analytics, cache invalidation)
by letting them publish named events that other components subscribe to.

Responsibilities
----------------
- Register/unregister listeners with priorities
- Publish events to all matching listeners (exact name + ``prefix.*`` wildcards)
- Run listeners in priority order; sync and async callbacks are both accepted
- Error isolation: one failing listener never blocks the others or the publisher

Design Decisions
----------------
- **Instance-based**: services receive a bus instance; tests build their own
- **Sequential by priority**: listeners are awaited one after another so a
  publisher observes every side effect before it continues
- **Identifiers**: derived from the callback unless given, used for dedupe
  and unsubscription

Examples
--------
>>> bus = EventBus()
>>> bus.subscribe("shop.avatar_purchased", on_purchase)
>>> await bus.publish("shop.avatar_purchased", {"player_id": "p1", "avatar_id": "neon"})
"""

from __future__ import annotations

import inspect
from collections import defaultdict
from typing import Any, Optional

from arcade.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from arcade.core.logging.logger import get_logger

logger = get_logger(__name__)


class EventBus:
    """
    Async EventBus with priority ordering and wildcard routing.

    Thread Safety
    -------------
    Designed for single-threaded asyncio usage. Registry mutations happen
    between awaits and are therefore atomic with respect to publishers.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[EventListener]] = defaultdict(list)
        self._published_count: int = 0
        self._listener_errors: int = 0

    # ------------------------------------------------------------------ #
    # Listener Validation
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        """
        Ensure callback accepts exactly one parameter.

        Raises
        ------
        ValueError:
            If callback signature is invalid.
        """
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            # Built-ins may not expose a signature; trust the caller
            return

        params = list(sig.parameters.values())
        if len(params) != 1:
            callback_name = getattr(callback, "__qualname__", repr(callback))
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(params)} parameters for '{callback_name}'"
            )

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event name or ``prefix.*`` pattern.

        Returns the listener identifier. Registering the same identifier
        twice for one event is a no-op.
        """
        self._validate_callback_signature(callback)

        listener = EventListener.build(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )

        existing = self._listeners[event_name]
        if any(item.identifier == listener.identifier for item in existing):
            logger.warning(
                "EventBus: duplicate listener prevented",
                extra={"event_name": event_name, "listener_id": listener.identifier},
            )
            return listener.identifier

        existing.append(listener)
        logger.debug(
            "EventBus: subscribed listener",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": listener.priority.name,
                "once": listener.once,
            },
        )
        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        listeners = self._listeners.get(event_name, [])
        remaining = [item for item in listeners if item.identifier != identifier]
        removed = len(remaining) != len(listeners)
        if removed:
            self._listeners[event_name] = remaining
            logger.debug(
                "EventBus: unsubscribed listener",
                extra={"event_name": event_name, "listener_id": identifier},
            )
        return removed

    def clear(self) -> None:
        """Remove all listeners. Intended for tests or full reinit."""
        self._listeners.clear()

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    def _matching_patterns(self, event_name: str) -> list[str]:
        patterns = [event_name]
        parts = event_name.split(".")
        for i in range(len(parts) - 1, 0, -1):
            patterns.append(".".join(parts[:i]) + ".*")
        patterns.append("*")
        return patterns

    def _extract_listeners(self, event_name: str) -> list[EventListener]:
        selected: list[EventListener] = []
        for pattern in self._matching_patterns(event_name):
            listeners = self._listeners.get(pattern)
            if not listeners:
                continue
            selected.extend(listeners)
            # once=True listeners are pruned before execution
            if any(item.once for item in listeners):
                self._listeners[pattern] = [item for item in listeners if not item.once]

        return sorted(selected, key=lambda item: item.priority.value)

    async def publish(self, event_name: str, data: EventPayload) -> list[Any]:
        """
        Publish an event to all subscribed listeners.

        Returns the results of listeners that completed without raising.
        """
        self._published_count += 1
        listeners = self._extract_listeners(event_name)

        if not listeners:
            logger.debug("EventBus: no listeners for event", extra={"event_name": event_name})
            return []

        results: list[Any] = []
        for listener in listeners:
            try:
                result = listener.callback(data)
                if inspect.isawaitable(result):
                    result = await result
                results.append(result)
            except Exception as exc:
                self._listener_errors += 1
                logger.error(
                    "EventBus: listener failed",
                    extra={
                        "event_name": event_name,
                        "listener_id": listener.identifier,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )

        return results

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        if event_name is not None:
            return len(self._listeners.get(event_name, []))
        return sum(len(items) for items in self._listeners.values())

    def get_metrics_summary(self) -> dict[str, Any]:
        return {
            "published": self._published_count,
            "listener_errors": self._listener_errors,
            "listeners": self.get_listener_count(),
        }
