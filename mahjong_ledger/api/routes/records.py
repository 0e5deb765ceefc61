from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from mahjong_ledger.api.dependencies import (
    get_ledger_service,
    require_role,
    require_super_admin,
)
from mahjong_ledger.core.auth import Role
from mahjong_ledger.schemas.ledger import RecordUpdateResponse, SuccessResponse
from mahjong_ledger.services.ledger_service import LedgerService

router = APIRouter(tags=["Records"])

Service = Annotated[LedgerService, Depends(get_ledger_service)]


@router.get("/records")
async def list_records(service: Service) -> list[dict[str, Any]]:
    """Public list of all game records, newest ``play_date`` first."""

    return await service.list_records()


@router.post("/records", response_model=SuccessResponse)
async def create_record(
    service: Service,
    role: Annotated[Role, Depends(require_role)],
    payload: Annotated[dict[str, Any], Body(description="Record fields, forwarded as-is.")],
) -> dict:
    """Upload a game record.

    Super-admins and sub-admins may upload; sub-admins are limited to one
    upload per cooldown window.

    Raises:
        AuthenticationAppError: 401 for an unknown credential.
        ThrottleAppError: 429 while the sub-admin cooldown is active.
        ConflictAppError: 409 for a duplicate record.
    """

    return await service.create_record(role, payload)


@router.put(
    "/records/{record_id}",
    response_model=RecordUpdateResponse,
    dependencies=[Depends(require_super_admin)],
)
async def update_record(
    record_id: str,
    service: Service,
    updates: Annotated[dict[str, Any], Body(description="Fields to change; 'id' is ignored.")],
) -> dict:
    """Edit a record (super-admin only). 404 when no record has this id."""

    return await service.update_record(record_id, updates)


@router.delete(
    "/records/{record_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_super_admin)],
)
async def delete_record(record_id: str, service: Service) -> dict:
    """Delete a record (super-admin only). Deleting a missing id still succeeds."""

    return await service.delete_record(record_id)
