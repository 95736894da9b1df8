"""
Rate Limiter Service

Fixed-window counters keyed by client identity.

Two kinds of policy use the same limiter:
- API calls: hard rejection once max_count is reached in the window.
- Login attempts: exponential delay between failures, then rejection.

State lives in an injected store, time comes from an injected clock.
Counters are per process; a restart clears them and several instances
each enforce their own limit.
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """Window and backoff settings (all durations in seconds)."""
    window: float
    max_count: int
    backoff_base: float = 0.0
    backoff_cap: float = 0.0
    lockout_delay: float = 0.0


@dataclass
class RateLimitRecord:
    count: int
    window_start: float


class InMemoryRateLimitStore:
    """Process-local record storage."""

    def __init__(self):
        self._records: Dict[str, RateLimitRecord] = {}

    def get(self, key: str) -> Optional[RateLimitRecord]:
        return self._records.get(key)

    def set(self, key: str, record: RateLimitRecord) -> None:
        self._records[key] = record

    def delete(self, key: str) -> None:
        self._records.pop(key, None)

    def sweep(self, is_stale: Callable[[RateLimitRecord], bool]) -> int:
        """Drop every record for which is_stale() is true. Returns how many."""
        stale_keys = [key for key, record in self._records.items() if is_stale(record)]
        for key in stale_keys:
            del self._records[key]
        return len(stale_keys)

    def __len__(self) -> int:
        return len(self._records)


class RateLimiter:
    """Fixed-window limiter for one policy."""

    def __init__(
        self,
        policy: RateLimitPolicy,
        store: Optional[InMemoryRateLimitStore] = None,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: Optional[float] = None,
        name: str = "default",
    ):
        self.policy = policy
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.clock = clock
        self.name = name
        self.sweep_interval = sweep_interval
        self._last_sweep = clock()

    # ------------------------------------------------------------------
    # Window bookkeeping
    # ------------------------------------------------------------------

    def _expired(self, record: RateLimitRecord, now: float) -> bool:
        return now - record.window_start > self.policy.window

    def _live_record(self, key: str, now: float) -> Optional[RateLimitRecord]:
        record = self.store.get(key)
        if record is None or self._expired(record, now):
            return None
        return record

    def _maybe_sweep(self, now: float) -> None:
        if self.sweep_interval is None or now - self._last_sweep < self.sweep_interval:
            return
        self._last_sweep = now
        removed = self.store.sweep(lambda record: self._expired(record, now))
        if removed:
            logger.debug(f"Rate limiter '{self.name}': swept {removed} stale record(s)")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check_and_increment(self, key: str) -> bool:
        """
        Count one request for key.

        Returns True if it is allowed. A rejected request does not
        increment the counter.
        """
        now = self.clock()
        self._maybe_sweep(now)

        record = self._live_record(key, now)
        if record is None:
            self.store.set(key, RateLimitRecord(count=1, window_start=now))
            return True

        if record.count >= self.policy.max_count:
            return False

        record.count += 1
        self.store.set(key, record)
        return True

    def attempts(self, key: str) -> int:
        """Number of counted requests in the current window."""
        record = self._live_record(key, self.clock())
        return record.count if record else 0

    def is_exhausted(self, key: str) -> bool:
        return self.attempts(key) >= self.policy.max_count

    def delay_for(self, key: str) -> float:
        """
        Backoff before answering the next failed attempt, in seconds.

        min(base * 2^(count-1), cap); zero when there are no attempts.
        A cap of 0 means uncapped.
        """
        count = self.attempts(key)
        if count <= 0 or self.policy.backoff_base <= 0:
            return 0.0
        delay = self.policy.backoff_base * (2 ** (count - 1))
        if self.policy.backoff_cap > 0:
            delay = min(delay, self.policy.backoff_cap)
        return delay

    def reset(self, key: str) -> None:
        self.store.delete(key)
