from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from mahjong_ledger.api.dependencies import get_ledger_service, require_super_admin
from mahjong_ledger.schemas.ledger import SuccessResponse
from mahjong_ledger.services.ledger_service import LedgerService

router = APIRouter(tags=["Aliases"])


@router.get("/aliases")
async def get_aliases(
    service: Annotated[LedgerService, Depends(get_ledger_service)],
) -> dict[str, Any]:
    """Public alias mapping. Returns ``{}`` instead of an error on failure."""

    return await service.get_aliases()


@router.post(
    "/aliases",
    response_model=SuccessResponse,
    dependencies=[Depends(require_super_admin)],
)
async def save_aliases(
    service: Annotated[LedgerService, Depends(get_ledger_service)],
    aliases: Annotated[dict[str, Any], Body(description="Complete alias mapping.")],
) -> dict:
    """Replace the alias mapping wholesale (super-admin only)."""

    return await service.save_aliases(aliases)
