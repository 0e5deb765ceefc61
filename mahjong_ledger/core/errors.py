"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses. Each subclass carries
the HTTP status it maps to so the global exception handler stays a lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    http_status: int
    retry_after: int
    remaining_minutes: int
    store_code: str
    record_id: str
    provider: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code: ClassVar[int] = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationAppError(AppError):
    """Raised when the server is misconfigured (not the client's fault)."""

    status_code: ClassVar[int] = 500


class AuthenticationAppError(AppError):
    """Raised when the presented credential matches no role."""

    status_code: ClassVar[int] = 401


class AuthorizationAppError(AppError):
    """Raised when a recognized role lacks the required privilege."""

    status_code: ClassVar[int] = 403


class NotFoundAppError(AppError):
    """Raised when the targeted record does not exist."""

    status_code: ClassVar[int] = 404


class ConflictAppError(AppError):
    """Raised when an insert violates a uniqueness constraint."""

    status_code: ClassVar[int] = 409


class ThrottleAppError(AppError):
    """Raised when a sub-admin write is attempted inside the cooldown window."""

    status_code: ClassVar[int] = 429


class StoreAppError(AppError):
    """Raised when the remote store fails."""

    status_code: ClassVar[int] = 500


class StoreQueryError(StoreAppError):
    """The store answered, but rejected the query (constraint, schema, ...)."""


class StoreUnavailableError(StoreAppError):
    """The store could not be reached (network, timeout, TLS)."""
