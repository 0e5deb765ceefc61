"""OpenAPI customization.

Adds the ``X-Admin-Token`` security scheme, marks every operation as requiring
it by default and exempts the public read endpoints.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from mahjong_ledger.core.auth import ADMIN_TOKEN_HEADER

# (path, method) pairs that need no credential
PUBLIC_OPERATIONS = {
    ("/api/records", "get"),
    ("/api/aliases", "get"),
    ("/health", "get"),
}

TAGS_METADATA = [
    {"name": "Auth", "description": "Credential check for the admin UI."},
    {"name": "Records", "description": "Game session records."},
    {"name": "Aliases", "description": "Display aliases for players."},
    {"name": "Settings", "description": "Super-admin settings (sub-admin password)."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add the admin token scheme."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "AdminToken",
            {
                "type": "apiKey",
                "in": "header",
                "name": ADMIN_TOKEN_HEADER,
                "description": "Super-admin or sub-admin password.",
            },
        )
        schema.setdefault("security", [{"AdminToken": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        tags.extend(t for t in TAGS_METADATA if t["name"] not in existing_tag_names)

        for path, methods in schema.get("paths", {}).items():
            for method, method_obj in methods.items():
                if (path, method) in PUBLIC_OPERATIONS and isinstance(method_obj, dict):
                    method_obj["security"] = []

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
