from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from mahjong_ledger.api.dependencies import get_ledger_service, require_role
from mahjong_ledger.core.auth import Role
from mahjong_ledger.schemas.ledger import LoginResponse
from mahjong_ledger.services.ledger_service import LedgerService

router = APIRouter(tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    role: Annotated[Role, Depends(require_role)],
    service: Annotated[LedgerService, Depends(get_ledger_service)],
) -> dict:
    """Check the ``X-Admin-Token`` credential and report the resolved role.

    Used by the front end to validate a password before enabling admin UI.
    No side effects.
    """

    return service.login(role)
