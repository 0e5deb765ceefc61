"""Sub-admin write throttling.

Wires the cooldown adapter to the role model:
- Only the sub-admin role is throttled; super-admins write freely.
- The check happens before the store write, the window starts only after the
  write succeeded, so a failed write never consumes it.
"""

from __future__ import annotations

import logging

from mahjong_ledger.adapters.rate_limit.base import AbstractWriteThrottle, CooldownResult
from mahjong_ledger.adapters.rate_limit.cooldown import CooldownRateLimiter
from mahjong_ledger.core.auth import Role
from mahjong_ledger.core.config import settings
from mahjong_ledger.core.errors import ThrottleAppError

logger = logging.getLogger(__name__)


_limiter: AbstractWriteThrottle | None = None
_limiter_config: int | None = None


def get_write_limiter() -> AbstractWriteThrottle:
    """Return the process-wide sub-admin write limiter.

    The instance is cached in-module to preserve state across requests.
    If the configured cooldown changes (primarily in tests), it is rebuilt.
    """

    global _limiter, _limiter_config

    cooldown = settings.app.sub_admin_cooldown_seconds
    if _limiter is None or _limiter_config != cooldown:
        _limiter = CooldownRateLimiter(cooldown_seconds=cooldown)
        _limiter_config = cooldown

    return _limiter


def check_write_allowed(
    role: Role,
    limiter: AbstractWriteThrottle,
    now: float | None = None,
) -> CooldownResult:
    """Raise if ``role`` is inside its write cooldown.

    Args:
        role: Resolved role of the caller.
        limiter: Throttle holding the shared last-write timestamp.
        now: Optional UNIX time override.

    Returns:
        CooldownResult: The (allowed) check result.

    Raises:
        ThrottleAppError: 429 with ``remaining_minutes`` when blocked.
    """

    if role is not Role.SUB_ADMIN:
        return CooldownResult(allowed=True)

    result = limiter.check(now)
    if result.allowed:
        logger.debug("rate_limit.sub_admin_allowed")
        return result

    logger.warning(
        "rate_limit.sub_admin_blocked",
        extra={
            "retry_after_s": result.retry_after_seconds,
            "remaining_minutes": result.remaining_minutes,
        },
    )
    raise ThrottleAppError(
        code="sub_admin_cooldown",
        message=f"Sub-admin uploads are limited. Try again in {result.remaining_minutes} minute(s).",
        details={
            "remaining_minutes": result.remaining_minutes,
            "retry_after": result.retry_after_seconds,
        },
    )


def record_successful_write(
    role: Role,
    limiter: AbstractWriteThrottle,
    now: float | None = None,
) -> None:
    """Start the cooldown window after a sub-admin write succeeded."""

    if role is Role.SUB_ADMIN:
        limiter.record_write(now)
