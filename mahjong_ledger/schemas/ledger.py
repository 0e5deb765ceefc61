"""Pydantic schemas for ledger requests and responses.

Records and aliases are opaque JSON objects and are passed through as
``dict[str, Any]``; only the envelopes are modeled here.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


class SuccessResponse(BaseModel):
    success: bool = Field(True, description="Always true on a 2xx response.")


class LoginResponse(SuccessResponse):
    """Result of a credential check."""

    role: str = Field(..., description="Resolved role: 'super_admin' or 'sub_admin'.")
    message: str = Field("", description="Human-readable confirmation.")


class RecordUpdateResponse(SuccessResponse):
    record: Dict[str, Any] = Field(
        ..., description="The updated record as read back from the store."
    )


class SubAdminPasswordRequest(BaseModel):
    """New sub-admin password; an empty string disables the sub-admin tier."""

    password: str = Field(
        "",
        description="Sub-admin password. Empty disables sub-admin access.",
    )
