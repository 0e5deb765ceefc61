from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from mahjong_ledger.api.dependencies import get_ledger_service
from mahjong_ledger.core.config import settings
from mahjong_ledger.services.ledger_service import LedgerService

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(service: Annotated[LedgerService, Depends(get_ledger_service)]) -> dict:
    """Liveness probe with cache counters. Does not touch the remote store."""

    return {
        "status": "ok",
        "env": settings.app_env,
        "store": settings.app.store_provider,
        "cache": service.cache.stats(),
    }
