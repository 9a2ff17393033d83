"""
EphemeralStore — in-memory key/value store with per-entry expiry.

Usage::

    store = EphemeralStore(scheduler=AsyncioScheduler())

    key = store.put(payload, on_expire=release_blob)
    store.get(key)        # deep copy of payload, taken at put() time
    store.delete(key)     # True, the expiry timer is now a no-op
    store.delete(key)     # False

    store.close()         # cancel every timer, drop every entry

Every put() schedules a one-shot expiry after ``ttl`` seconds that calls
delete(). The owner's ``on_expire`` cleanup runs only when that delete()
actually removed the entry, never when another path deleted it first.
"""

import copy
import logging
import uuid
from typing import Any, Callable, Optional

from imgsearch.exceptions import StoreError

from .scheduler import AsyncioScheduler, Scheduler, TimerHandle

__all__ = ["EphemeralStore", "DEFAULT_TTL"]

logger = logging.getLogger(__name__)

DEFAULT_TTL = 120.0   # seconds


class EphemeralStore:
    """
    Short-lived storage for image payloads and upload sessions.

    Single-threaded: all access happens on the event loop, so no locking.
    There is no capacity bound; entries leave through delete() or expiry.
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        ttl: float = DEFAULT_TTL,
    ) -> None:
        self._scheduler = scheduler or AsyncioScheduler()
        self._ttl = ttl
        self._entries: dict[str, Any] = {}
        self._timers: dict[str, TimerHandle] = {}
        self._closed = False

    # ── Public API ────────────────────────────────────────────────────────

    def put(self, value: Any, on_expire: Optional[Callable[[Any], Any]] = None) -> str:
        """
        Store a deep copy of *value* under a fresh random key.

        Args:
            value:     Any deep-copyable object.
            on_expire: Cleanup called with the stored value when the expiry
                       timer removes the entry. May return an awaitable.

        Returns:
            The new key (uuid4 hex, 128 bits).
        """
        if self._closed:
            raise StoreError("store is closed")
        key = uuid.uuid4().hex
        self._entries[key] = copy.deepcopy(value)
        self._timers[key] = self._scheduler.call_later(
            self._ttl, lambda: self._expire(key, on_expire)
        )
        logger.debug("store: put %s (%s)", key, type(value).__name__)
        return key

    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is unknown or expired."""
        return self._entries.get(key)

    def delete(self, key: str) -> bool:
        """
        Remove *key*.

        Returns:
            True iff this call removed the entry; False when it was already
            gone (deleted, expired, or never stored).
        """
        if key not in self._entries:
            return False
        del self._entries[key]
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        logger.debug("store: deleted %s", key)
        return True

    def close(self) -> None:
        """Cancel all pending timers and drop every entry."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._entries.clear()
        self._closed = True

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # ── Internal helpers ──────────────────────────────────────────────────

    def _expire(self, key: str, on_expire: Optional[Callable[[Any], Any]]) -> Any:
        value = self._entries.get(key)
        self._timers.pop(key, None)
        if not self.delete(key):
            return None
        logger.debug("store: %s expired", key)
        if on_expire is not None:
            return on_expire(value)
        return None
