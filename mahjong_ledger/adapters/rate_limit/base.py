"""Write throttle interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CooldownResult:
    """Outcome of a cooldown check.

    Attributes:
        allowed: Whether the write may proceed.
        retry_after_seconds: Whole seconds until the window closes (0 when allowed).
        remaining_minutes: Same wait rounded up to whole minutes (0 when allowed).
    """

    allowed: bool
    retry_after_seconds: int = 0
    remaining_minutes: int = 0


class AbstractWriteThrottle(ABC):
    """Interface for throttles guarding record writes."""

    @abstractmethod
    def check(self, now: float | None = None) -> CooldownResult:
        """Report whether a write is allowed at ``now`` without consuming it."""
        raise NotImplementedError

    @abstractmethod
    def record_write(self, now: float | None = None) -> None:
        """Start a new cooldown window after a successful write."""
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Forget the last write."""
        raise NotImplementedError
