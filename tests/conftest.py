"""Shared test fixtures.

Provides:
- ``set_test_config``: autouse fixture that patches common settings
- ``service``: a MasterService pre-loaded with items jobA, jobB, jobC
- ``client``: TestClient wrapping an app built around ``service``
- ``auth_header``: helper that returns a bearer header for an operator
"""

import pytest
from fastapi.testclient import TestClient

from conductor.api.rate_limit import rebuild_limiter
from conductor.auth import create_token
from conductor.main import create_app
from conductor.services.master_service import MasterService

OPERATOR = "release-bot"
ITEM_NAMES = ("jobA", "jobB", "jobC")

# ---------------------------------------------------------------------------
# Environment patching
# ---------------------------------------------------------------------------

_SETTINGS_PATCHES: dict[str, object] = {
    "conductor.config.settings.JWT_SECRET": "test-secret-key-for-unit-tests",
    "conductor.config.settings.DATABASE_URL": "",
    "conductor.config.settings.REQUIRE_AUTH": True,
    "conductor.config.settings.FRONTEND_URL": "http://localhost:5173",
}


@pytest.fixture(autouse=True)
def set_test_config(monkeypatch):
    """Patch common application settings for a safe test environment."""
    for target, value in _SETTINGS_PATCHES.items():
        monkeypatch.setattr(target, value)
    rebuild_limiter.reset()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def auth_header(operator: str = OPERATOR) -> dict:
    """Return an ``Authorization`` header dict with a valid JWT."""
    return {"Authorization": f"Bearer {create_token(operator)}"}


@pytest.fixture
def service() -> MasterService:
    svc = MasterService()
    for name in ITEM_NAMES:
        svc.register_item(name)
    return svc


@pytest.fixture
def client(service: MasterService) -> TestClient:
    return TestClient(create_app(service), raise_server_exceptions=False)
