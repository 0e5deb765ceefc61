from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from mahjong_ledger.api.dependencies import get_ledger_service, require_super_admin
from mahjong_ledger.schemas.ledger import SubAdminPasswordRequest, SuccessResponse
from mahjong_ledger.services.ledger_service import LedgerService

router = APIRouter(tags=["Settings"])


@router.post(
    "/settings/sub-password",
    response_model=SuccessResponse,
    dependencies=[Depends(require_super_admin)],
)
async def set_sub_admin_password(
    body: SubAdminPasswordRequest,
    service: Annotated[LedgerService, Depends(get_ledger_service)],
) -> dict:
    """Set the sub-admin password (super-admin only).

    An empty password disables the sub-admin tier. Takes effect immediately.
    """

    return await service.set_sub_admin_password(body.password)
