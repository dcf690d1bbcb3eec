from unittest.mock import AsyncMock, MagicMock

import pytest

TEST_JWT_SECRET = "test-secret-key-for-unit-tests-must-be-32-chars"


# ── Patch settings before any other import ──────────────────────────────────
@pytest.fixture(autouse=True)
def _patch_settings(monkeypatch):
    monkeypatch.setenv("JWT_SECRET_KEY", TEST_JWT_SECRET)
    from src.core.config import settings
    monkeypatch.setattr(settings, "jwt_secret_key", TEST_JWT_SECRET)
    monkeypatch.setattr(settings, "jwt_access_token_expire_minutes", 15)
    monkeypatch.setattr(settings, "smtp_host", "")
    monkeypatch.setattr(settings, "currency", "EUR")
    monkeypatch.setattr(settings, "default_prescription_lens_price", "60.00")


@pytest.fixture
def mock_db():
    """Create a mock async database session."""
    db = AsyncMock()
    db.flush = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.get = AsyncMock(return_value=None)
    db.execute = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.begin_nested = MagicMock()
    return db
