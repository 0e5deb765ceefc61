"""Shared-secret role resolution.

Two secrets grant access:
- the static super-admin password from configuration (``ADMIN_PASSWORD``)
- the sub-admin password stored in the remote ``settings`` table, read through
  the ledger cache so a freshly set password is honored after the forced resync

Any other credential resolves to ``unauthenticated``. There are no sessions
or per-user identities; the credential is sent on every request.
"""

from __future__ import annotations

import hmac
import logging
from enum import Enum

from mahjong_ledger.core.config import settings
from mahjong_ledger.core.errors import AuthenticationAppError, AuthorizationAppError, StoreAppError
from mahjong_ledger.core.logging import fingerprint
from mahjong_ledger.utils.ledger_cache import LedgerCache

logger = logging.getLogger(__name__)

ADMIN_TOKEN_HEADER = "X-Admin-Token"


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    SUB_ADMIN = "sub_admin"
    UNAUTHENTICATED = "unauthenticated"


def _secret_equals(provided: str, expected: str) -> bool:
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def is_super_admin_secret(credential: str | None) -> bool:
    """Check a credential against the configured super-admin password."""

    return bool(credential) and _secret_equals(credential, settings.auth.password)


def resolve_role(credential: str | None, sub_admin_password: str | None) -> Role:
    """Classify a credential.

    The super-admin password wins even if it also equals the sub-admin one.
    An empty or missing sub-admin password disables that tier entirely.

    Args:
        credential: Value of the admin token header, if any.
        sub_admin_password: Current sub-admin password from the cache.

    Returns:
        Role: The resolved role.

    Examples:
        >>> resolve_role(None, "abc")
        <Role.UNAUTHENTICATED: 'unauthenticated'>
    """
    if not credential:
        return Role.UNAUTHENTICATED
    if is_super_admin_secret(credential):
        return Role.SUPER_ADMIN
    if sub_admin_password and _secret_equals(credential, sub_admin_password):
        return Role.SUB_ADMIN
    return Role.UNAUTHENTICATED


async def authenticate(credential: str | None, cache: LedgerCache) -> Role:
    """Resolve a credential against the live cache, rejecting unknown ones.

    The super-admin check needs no store access. Otherwise the cache is
    lazily synced first so a restarted process still knows the stored
    sub-admin password. If that sync fails the published snapshot is used
    as is, so a store outage never turns a bad credential into a 500.

    Raises:
        AuthenticationAppError: 401 when the credential matches no role.
    """
    if is_super_admin_secret(credential):
        role = Role.SUPER_ADMIN
    else:
        if credential:
            try:
                await cache.sync(force_refresh=False)
            except StoreAppError as exc:
                logger.warning(
                    "auth.sync_failed",
                    extra={"error_code": exc.code, "error_msg": exc.message},
                )
        role = resolve_role(credential, cache.snapshot().sub_admin_password)

    if role is Role.UNAUTHENTICATED:
        logger.warning(
            "auth.rejected",
            extra={
                "credential_present": bool(credential),
                "credential_hash": fingerprint(credential),
            },
        )
        raise AuthenticationAppError(
            code="invalid_admin_token",
            message="Invalid or missing admin password",
        )

    logger.info("auth.success", extra={"role": role.value})
    return role


def ensure_super_admin(role: Role) -> Role:
    """Reject any role below super-admin.

    Raises:
        AuthorizationAppError: 403 for recognized but insufficient roles.
    """
    if role is not Role.SUPER_ADMIN:
        logger.warning("auth.forbidden", extra={"role": role.value, "required": Role.SUPER_ADMIN.value})
        raise AuthorizationAppError(
            code="super_admin_required",
            message="This action requires the super-admin password",
        )
    return role
