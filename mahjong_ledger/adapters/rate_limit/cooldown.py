"""In-memory cooldown throttle for sub-admin writes.

Notes:
- Per-process only: running multiple workers gives each its own window.
- One shared timestamp, not per credential.
- ``check`` and ``record_write`` are separate calls, so two concurrent writes
  can both pass the check. Best-effort throttling, not a quota.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

from mahjong_ledger.adapters.rate_limit.base import AbstractWriteThrottle, CooldownResult


class CooldownRateLimiter(AbstractWriteThrottle):
    """Allow one write per cooldown window, measured from the last success."""

    def __init__(
        self,
        *,
        cooldown_seconds: int = 600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            cooldown_seconds: Minimum interval between successful writes.
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If cooldown_seconds is not positive.
        """
        if cooldown_seconds < 1:
            raise ValueError("cooldown_seconds must be >= 1")

        self._cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._last_write: float | None = None

    @property
    def cooldown_seconds(self) -> int:
        return self._cooldown_seconds

    @property
    def last_write(self) -> float | None:
        return self._last_write

    def check(self, now: float | None = None) -> CooldownResult:
        now = self._clock() if now is None else now

        with self._lock:
            last_write = self._last_write

        if last_write is None:
            return CooldownResult(allowed=True)

        remaining = self._cooldown_seconds - (now - last_write)
        if remaining <= 0:
            return CooldownResult(allowed=True)

        return CooldownResult(
            allowed=False,
            retry_after_seconds=max(1, math.ceil(remaining)),
            remaining_minutes=max(1, math.ceil(remaining / 60)),
        )

    def record_write(self, now: float | None = None) -> None:
        now = self._clock() if now is None else now
        with self._lock:
            self._last_write = now

    def reset(self) -> None:
        with self._lock:
            self._last_write = None
