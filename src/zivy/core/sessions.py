"""Visitor session to vendor thread registry."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000


def session_key(client_ip: str, user_agent: str) -> str:
    """Opaque key approximating "the same visitor"."""
    raw = f"{client_ip}|{user_agent}".encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


class SessionRegistry:
    """Maps session keys to vendor thread handles.

    Growth is capped at *capacity*: when an insert pushes the size over
    the cap, the single oldest-inserted key is dropped.  Eviction follows
    first insertion only; a later lookup does not refresh a key.  There
    is no time-based expiry.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        # dict preserves insertion order, first key is the oldest
        self._handles: dict[str, str] = {}

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, key: object) -> bool:
        return key in self._handles

    def get(self, key: str) -> str | None:
        return self._handles.get(key)

    async def get_or_create(
        self, key: str, create: Callable[[], Awaitable[str]]
    ) -> str:
        """Return the handle for *key*, creating it via *create* if absent."""
        handle = self._handles.get(key)
        if handle is not None:
            return handle

        handle = await create()
        self._handles[key] = handle
        if len(self._handles) > self._capacity:
            oldest = next(iter(self._handles))
            del self._handles[oldest]
            logger.debug(
                "Session registry over capacity (%d), evicted oldest session",
                self._capacity,
            )
        return handle

    def discard(self, key: str) -> None:
        """Forget *key* if present, so its next request creates a new handle."""
        self._handles.pop(key, None)

    def clear(self) -> None:
        self._handles.clear()
