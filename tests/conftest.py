"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any application import so the settings
singleton picks them up: the in-memory store replaces Supabase and the
super-admin password is fixed.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("APP_STORE_PROVIDER", "memory")
os.environ.setdefault("ADMIN_PASSWORD", "super-secret-test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from mahjong_ledger.adapters.rate_limit.cooldown import CooldownRateLimiter  # noqa: E402
from mahjong_ledger.adapters.store.in_memory import InMemoryStore  # noqa: E402
from mahjong_ledger.api.dependencies import get_ledger_service  # noqa: E402
from mahjong_ledger.core.app_factory import create_app  # noqa: E402
from mahjong_ledger.services.ledger_service import LedgerService  # noqa: E402
from mahjong_ledger.utils.ledger_cache import LedgerCache  # noqa: E402

SUPER_ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]
SUB_ADMIN_PASSWORD = "sub-secret-test"


def sample_records() -> list[dict]:
    return [
        {"id": 1, "play_date": "2024-03-01", "players": {"east": "Ana", "south": "Bo"}, "scores": [25000, 25000]},
        {"id": 2, "play_date": "2024-03-08", "players": {"east": "Cy", "south": "Ana"}, "scores": [40000, 10000]},
        {"id": 42, "play_date": "2024-02-20", "players": {"east": "Bo", "south": "Cy"}, "scores": [30000, 20000]},
    ]


@pytest.fixture
def store() -> InMemoryStore:
    """Store seeded with three records, aliases and a sub-admin password."""
    return InMemoryStore(
        seed={
            "records": sample_records(),
            "settings": [
                {"key": "mahjong_aliases", "value": {"Ana": "Anastasia"}},
                {"key": "sub_admin_password", "value": SUB_ADMIN_PASSWORD},
            ],
        }
    )


@pytest.fixture
def clock() -> Mock:
    """Controllable UNIX clock for the write limiter."""
    return Mock(return_value=1_000_000.0)


@pytest.fixture
def limiter(clock: Mock) -> CooldownRateLimiter:
    return CooldownRateLimiter(cooldown_seconds=600, clock=clock)


@pytest.fixture
def service(store: InMemoryStore, limiter: CooldownRateLimiter) -> LedgerService:
    return LedgerService(cache=LedgerCache(store), limiter=limiter)


@pytest.fixture
def client(service: LedgerService) -> TestClient:
    """HTTP client bound to a fresh app using the fixture service."""
    app = create_app()
    app.dependency_overrides[get_ledger_service] = lambda: service
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def super_headers() -> dict[str, str]:
    return {"X-Admin-Token": SUPER_ADMIN_PASSWORD}


@pytest.fixture
def sub_headers() -> dict[str, str]:
    return {"X-Admin-Token": SUB_ADMIN_PASSWORD}
