"""FastAPI dependencies wiring the ledger service and role checks into routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from mahjong_ledger.adapters.store.factory import create_store
from mahjong_ledger.core.auth import ADMIN_TOKEN_HEADER, Role, authenticate, ensure_super_admin
from mahjong_ledger.core.rate_limit import get_write_limiter
from mahjong_ledger.services.ledger_service import LedgerService
from mahjong_ledger.utils.ledger_cache import LedgerCache

_service: LedgerService | None = None


def get_ledger_service() -> LedgerService:
    """Return the process-wide ledger service, building it on first use.

    The store client and the cache live for the whole process; tests swap
    the service through ``app.dependency_overrides``.
    """

    global _service

    if _service is None:
        _service = LedgerService(cache=LedgerCache(create_store()), limiter=get_write_limiter())
    return _service


async def require_role(
    service: Annotated[LedgerService, Depends(get_ledger_service)],
    x_admin_token: Annotated[str | None, Header(alias=ADMIN_TOKEN_HEADER)] = None,
) -> Role:
    """Resolve the caller's role from the ``X-Admin-Token`` header.

    Raises:
        AuthenticationAppError: 401 when the credential matches no role.
    """

    return await authenticate(x_admin_token, service.cache)


async def require_super_admin(role: Annotated[Role, Depends(require_role)]) -> Role:
    """Allow only the super-admin role.

    Raises:
        AuthorizationAppError: 403 for a valid sub-admin credential.
    """

    return ensure_super_admin(role)
