from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mahjong_ledger.api.routes import (
    aliases_router,
    health_router,
    login_router,
    records_router,
    settings_router,
)
from mahjong_ledger.core.config import settings
from mahjong_ledger.core.exception_handlers import setup_exception_handlers
from mahjong_ledger.core.logging import configure_logging
from mahjong_ledger.core.middleware import request_id_middleware
from mahjong_ledger.core.openapi import apply_openapi_customizations


def _parse_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Mahjong Ledger API",
        description=(
            "Score ledger for mahjong game sessions. Public reads of records and "
            "player aliases; uploads require the X-Admin-Token header (super-admin "
            "or rate-limited sub-admin password), edits and settings require the "
            "super-admin password."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_parse_origins(settings.app.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.log.request_id_header, "Retry-After"],
    )
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(login_router, prefix="/api")
    app.include_router(records_router, prefix="/api")
    app.include_router(aliases_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")
    app.include_router(health_router)

    # OpenAPI customizations (security scheme, tags, public endpoints)
    apply_openapi_customizations(app)

    return app
