import asyncio
import time
from typing import Awaitable, Callable, Dict, Generic, Optional, TypeVar

from .models import CachedResponse

T = TypeVar("T")


class ResponseCache:
    """Owns the cached upstream responses, one entry per key.

    Entries are immutable and swapped whole, so a reader sees either the old
    entry or the new one.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._entries: Dict[str, CachedResponse] = {}

    def get(self, key: str) -> Optional[CachedResponse]:
        return self._entries.get(key)

    def get_fresh(self, key: str) -> Optional[CachedResponse]:
        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(self.clock()):
            return entry
        return None

    def put(self, key: str, entry: CachedResponse) -> None:
        self._entries[key] = entry


class SingleFlight(Generic[T]):
    """At most one outstanding call per key; concurrent callers share its result."""

    def __init__(self):
        self._inflight: Dict[str, "asyncio.Future[T]"] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        fut = self._inflight.get(key)
        if fut is None:
            fut = asyncio.ensure_future(fn())
            self._inflight[key] = fut
            fut.add_done_callback(lambda f: self._forget(key, f))
        # shield: one caller going away must not cancel the shared call
        return await asyncio.shield(fut)

    def _forget(self, key: str, fut: "asyncio.Future[T]") -> None:
        if self._inflight.get(key) is fut:
            del self._inflight[key]
        if not fut.cancelled():
            fut.exception()  # mark retrieved
