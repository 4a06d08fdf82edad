"""Short-lived in-memory snapshot of relay authorization records."""

import time
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class RelayCache(Generic[T]):
    """
    Holds the last value returned by ``loader`` for ``ttl`` seconds.

    Store mutations call ``invalidate()`` so the next read goes back to the
    store instead of waiting for the TTL to run out.
    """

    def __init__(self, loader: Callable[[], T], ttl: float):
        self.loader = loader
        self.ttl = ttl
        self._value: T | None = None
        self._loaded_at = 0.0
        self._stale = True

    def snapshot(self) -> T:
        now = time.monotonic()
        if self._stale or now - self._loaded_at > self.ttl:
            self._value = self.loader()
            self._loaded_at = now
            self._stale = False
        return self._value

    def invalidate(self) -> None:
        self._stale = True
