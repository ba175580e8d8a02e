"""
Shared pytest fixtures.

Every test gets its own SQLite file under ``tmp_path`` with all
migrations applied.
"""

import pytest
from fastapi.testclient import TestClient

from skill_swap_api.app.core.config import settings
from skill_swap_api.app.core.db import init_db
from skill_swap_api.app.main import app


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Point the application at a fresh database for each test."""
    db_path = tmp_path / "skill_swap_test.db"
    monkeypatch.setattr(settings, "database_url", str(db_path))
    init_db()
    return db_path


@pytest.fixture
def admin_secret(monkeypatch):
    secret = "bootstrap-secret-for-tests"
    monkeypatch.setattr(settings, "admin_secret_key", secret)
    return secret


@pytest.fixture
def client(database):
    with TestClient(app) as test_client:
        yield test_client
