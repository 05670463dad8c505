"""
Per-key rate limiter for outbound source calls.

Each key (a source identity such as "etherscan") owns a single slot:
- Only one caller holds the slot at a time.
- Waiting callers are served in the order they asked (asyncio.Lock is FIFO).
- A holder never starts earlier than `min_interval_ms` after the previous
  holder of the same key released the slot.

Calls without a key are not throttled at all.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _KeySlot:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    last_completed_at: Optional[float] = None


class RateLimiter:
    """
    Serializes work per key and spaces it by a minimum interval.

    Owned by the pipeline context and passed to whatever needs throttled calls.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep
        self._slots: Dict[str, _KeySlot] = {}

    @asynccontextmanager
    async def acquire(self, key: Optional[str], min_interval_ms: int) -> AsyncIterator[None]:
        """
        Hold the slot for `key` while the caller performs one unit of work.

        On release the completion time is recorded for the key, whether the
        work succeeded or raised.
        """
        if not key:
            yield
            return

        slot = self._slots.get(key)
        if slot is None:
            slot = self._slots[key] = _KeySlot()

        async with slot.lock:
            wait = self.delay_for(key, min_interval_ms)
            if wait > 0:
                logger.debug(f"Throttling {key}: waiting {wait:.3f}s")
                await self._sleep(wait)
            try:
                yield
            finally:
                slot.last_completed_at = self._clock()

    def delay_for(self, key: str, min_interval_ms: int) -> float:
        """Seconds a new holder of `key` would have to wait right now."""
        slot = self._slots.get(key)
        if slot is None or slot.last_completed_at is None:
            return 0.0
        elapsed = self._clock() - slot.last_completed_at
        return max(0.0, min_interval_ms / 1000.0 - elapsed)
