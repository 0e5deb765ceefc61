from __future__ import annotations

from mahjong_ledger.api.routes.aliases import router as aliases_router
from mahjong_ledger.api.routes.health import router as health_router
from mahjong_ledger.api.routes.login import router as login_router
from mahjong_ledger.api.routes.records import router as records_router
from mahjong_ledger.api.routes.settings import router as settings_router

__all__ = [
    "aliases_router",
    "health_router",
    "login_router",
    "records_router",
    "settings_router",
]
