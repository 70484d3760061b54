"""
Avatar image URL cache.

Purpose
-------
Hold the avatar id -> image URL mapping in process memory so profile and
shop reads never hit the database for image paths.

Lifecycle
---------
- ``get(key)`` is synchronous and never triggers a load; it returns None
  until the cache has been warmed, and for unknown keys
- ``await warm()`` loads the mapping once; concurrent callers await the same
  in-flight load. A failed load propagates to every waiter and leaves the
  cache unloaded, so the next ``warm()`` starts over
- ``invalidate()`` drops the mapping; a load that was in flight when the
  cache was invalidated does not repopulate it

Metrics
-------
Hits, misses, loads and load failures are counted and exposed through
``get_metrics()``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from arcade.core.logging.logger import get_logger

logger = get_logger(__name__)

ImageLoader = Callable[[], Awaitable[Mapping[str, Optional[str]]]]

DEFAULT_BASE_PATH = "/avatars/"
_EMPTY_AVATAR_KEYS = frozenset({"", "none"})


def resolve_image_url(raw: Optional[str], base_path: str = DEFAULT_BASE_PATH) -> Optional[str]:
    """
    Turn a stored image reference into a URL.

    Absolute URLs and rooted paths pass through; bare file names are placed
    under ``base_path``. Empty references resolve to None.

    >>> resolve_image_url("neon.png")
    '/avatars/neon.png'
    >>> resolve_image_url("https://cdn.example.com/a.png")
    'https://cdn.example.com/a.png'
    """
    if raw is None:
        return None
    raw = raw.strip()
    if raw.lower() in _EMPTY_AVATAR_KEYS:
        return None
    if raw.startswith("http") or raw.startswith("/"):
        return raw
    if not base_path.endswith("/"):
        base_path = f"{base_path}/"
    return f"{base_path}{raw}"


class AvatarImageCache:
    """
    Explicit, load-once cache of avatar image URLs.

    Args:
        loader: Coroutine function returning ``{avatar_id: image_url}``
    """

    def __init__(self, loader: ImageLoader) -> None:
        self._loader = loader
        self._entries: Dict[str, Optional[str]] = {}
        self._loaded: bool = False
        self._load_task: Optional[asyncio.Task] = None
        self._generation: int = 0
        self._metrics: Dict[str, int] = {
            "hits": 0,
            "misses": 0,
            "loads": 0,
            "load_failures": 0,
            "invalidations": 0,
        }

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def get(self, key: Optional[str]) -> Optional[str]:
        """Cached URL for ``key``; None when unloaded, unknown or empty."""
        if key is None or key.strip().lower() in _EMPTY_AVATAR_KEYS:
            return None

        if key in self._entries:
            self._metrics["hits"] += 1
            return self._entries[key]

        self._metrics["misses"] += 1
        return None

    async def warm(self) -> None:
        """
        Load the mapping if it is not loaded yet.

        Raises:
            Whatever the loader raises; the cache stays unloaded.
        """
        if self._loaded:
            return

        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load(self._generation))

        task = self._load_task
        try:
            # One waiter being cancelled must not cancel the shared load
            await asyncio.shield(task)
        finally:
            if task.done() and self._load_task is task:
                self._load_task = None

    async def _load(self, generation: int) -> None:
        try:
            entries = await self._loader()
        except Exception as exc:
            self._metrics["load_failures"] += 1
            logger.warning(
                "Avatar image cache load failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            raise

        if generation != self._generation:
            logger.debug("Avatar image cache load discarded after invalidation")
            return

        self._entries = dict(entries)
        self._loaded = True
        self._metrics["loads"] += 1
        logger.info(
            "Avatar image cache warmed",
            extra={"entry_count": len(self._entries)},
        )

    def invalidate(self) -> None:
        """Drop all entries; the next ``warm()`` reloads."""
        self._generation += 1
        self._entries = {}
        self._loaded = False
        self._load_task = None
        self._metrics["invalidations"] += 1
        logger.debug("Avatar image cache invalidated")

    def get_metrics(self) -> Dict[str, Any]:
        lookups = self._metrics["hits"] + self._metrics["misses"]
        hit_rate = (self._metrics["hits"] / lookups * 100.0) if lookups else 0.0
        return {
            **self._metrics,
            "entries": len(self._entries),
            "loaded": self._loaded,
            "hit_rate": round(hit_rate, 2),
        }
