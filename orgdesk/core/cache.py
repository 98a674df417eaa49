"""Expiring key-value storage.

This module provides the TTL cache used to memoize per-user lookups such as
conversation lists and message pages. Entries carry their own expiry and are
dropped lazily when read, or eagerly through :meth:`TTLStorage.cleanup`.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Tuple

from orgdesk.core.logging_config import get_logger

logger = get_logger(__name__)


CACHE_KEYS = {
    "CURRENT_USER": "currentUser",
    "SELECTED_CHAT": "selectedChat",
    "CONVERSATIONS": "conversations",
    "MESSAGES_PREFIX": "messages_",
}

CACHE_EXPIRY = {
    "SHORT": 60,
    "MEDIUM": 300,
    "LONG": 3600,
    "DAY": 86400,
}


def conversations_key(user_id: str) -> str:
    return f"{CACHE_KEYS['CONVERSATIONS']}_{user_id}"


def messages_key(channel_id: str) -> str:
    return f"{CACHE_KEYS['MESSAGES_PREFIX']}{channel_id}"


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLStorage:
    """Key-value storage where every entry has its own time-to-live.

    Attributes:
        clock: Callable returning the current time in seconds. Tests inject a fake.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: Dict[str, _Entry] = {}
        self._inflight: Dict[str, asyncio.Future] = {}
        self.clock = clock

    def set(self, key: str, value: Any, ttl_seconds: float = CACHE_EXPIRY["MEDIUM"]) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""
        self._entries[key] = _Entry(value=value, expires_at=self.clock() + ttl_seconds)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for ``key``, or ``default`` when missing or expired.

        An expired entry is removed as a side effect of the read.
        """
        entry = self._entries.get(key)
        if entry is None:
            return default
        if self.clock() >= entry.expires_at:
            del self._entries[key]
            return default
        return entry.value

    def peek(self, key: str) -> Tuple[Any, bool]:
        """Return ``(value, fresh)`` for ``key`` without evicting it.

        ``value`` is ``None`` and ``fresh`` is False when nothing is stored.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None, False
        return entry.value, self.clock() < entry.expires_at

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def remove_prefix(self, prefix: str) -> int:
        keys = [k for k in self._entries if k.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        self._entries.clear()

    def cleanup(self) -> int:
        """Drop every expired entry.

        Returns:
            Number of entries removed
        """
        now = self.clock()
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Cache cleanup removed {len(expired)} expired entries")
        return len(expired)

    def debug_dump(self) -> Dict[str, Dict[str, Any]]:
        """Describe every stored entry without evicting anything.

        Returns:
            Mapping of key to ``{"value", "expires_in", "expired"}``
        """
        now = self.clock()
        return {
            key: {
                "value": entry.value,
                "expires_in": round(entry.expires_at - now, 3),
                "expired": now >= entry.expires_at,
            }
            for key, entry in self._entries.items()
        }

    def size(self) -> int:
        return len(self._entries)


_MISSING = object()


async def cached_fetch(
    storage: TTLStorage,
    key: str,
    loader: Callable[[], Awaitable[Any]],
    ttl_seconds: float = CACHE_EXPIRY["MEDIUM"],
) -> Any:
    """Return the cached value for ``key`` or load and cache it.

    Concurrent callers for the same key share a single in-flight load. When
    the loader fails and a stale value is still stored, the stale value is
    returned instead of the error. If the leading load is cancelled, waiting
    callers start a load of their own.

    Args:
        storage: Cache to read from and write to
        key: Cache key
        loader: Coroutine factory producing the fresh value
        ttl_seconds: Lifetime of a freshly loaded value

    Returns:
        The cached or freshly loaded value
    """
    stored = key in storage._entries
    cached, fresh = storage.peek(key)
    if fresh:
        return cached

    pending = storage._inflight.get(key)
    if pending is not None:
        try:
            return await asyncio.shield(pending)
        except asyncio.CancelledError:
            if not pending.cancelled():
                raise
            # The leading load was cancelled, not this caller
            return await cached_fetch(storage, key, loader, ttl_seconds)

    future: asyncio.Future = asyncio.get_running_loop().create_future()
    storage._inflight[key] = future
    try:
        value = await loader()
    except Exception as e:
        if not stored:
            future.set_exception(e)
            # Mark retrieved so an unawaited future does not warn
            future.exception()
            raise
        logger.warning(f"Serving stale cache entry for '{key}' after load failure: {e}")
        future.set_result(cached)
        return cached
    else:
        storage.set(key, value, ttl_seconds)
        future.set_result(value)
        return value
    finally:
        if not future.done():
            future.cancel()
        storage._inflight.pop(key, None)


def invalidate_conversations(storage: TTLStorage, user_ids: Iterable[str]) -> None:
    """Drop the cached conversation lists of ``user_ids``."""
    for user_id in user_ids:
        storage.remove(conversations_key(user_id))
