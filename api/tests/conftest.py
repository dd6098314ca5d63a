"""
Pytest fixtures for OpsDesk API testing.

This module provides:
1. Test environment settings (in-memory document store, short autosave delay)
2. Document store and repository fixtures
3. HTTP client fixtures with a signed-in user (the X-User-Email test
   header stands in for a verified Firebase ID token)
"""

from typing import Annotated, Any

import pytest
from fastapi import Header
from fastapi.testclient import TestClient

from src.config import get_settings
from src.core.auth import UserPrincipal, build_principal, get_current_user_optional
from src.core.document_store import MemoryDocumentStore
from src.core.exceptions import DocumentStoreError
from src.repositories.connections import ConnectionRepository
from src.repositories.reports import ReportRepository
from src.services.notifications import Notifier


# ==================== CONFIGURATION ====================

ADMIN_EMAIL = "boss@example.com"
AGENT_EMAIL = "lovely@example.com"

# Short enough to keep timer-driven tests fast
TEST_AUTOSAVE_DELAY = 0.05


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Point settings at the in-memory store for every test."""
    monkeypatch.setenv("OPSDESK_ENVIRONMENT", "testing")
    monkeypatch.setenv("OPSDESK_DOCUMENT_STORE", "memory")
    monkeypatch.setenv("OPSDESK_AUTOSAVE_DELAY_SECONDS", str(TEST_AUTOSAVE_DELAY))
    monkeypatch.setenv("OPSDESK_ADMIN_EMAILS", ADMIN_EMAIL)
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


# ==================== STORE FIXTURES ====================


class FailingDocumentStore(MemoryDocumentStore):
    """Memory store whose operations can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False
        self.writes: list[tuple[str, dict[str, Any]]] = []

    async def get(self, path: str):
        if self.fail_reads:
            raise DocumentStoreError("read failed", path=path)
        return await super().get(path)

    async def list(self, collection_path: str):
        if self.fail_reads:
            raise DocumentStoreError("list failed", path=collection_path)
        return await super().list(collection_path)

    async def set(self, path: str, data: dict[str, Any]) -> None:
        if self.fail_writes:
            raise DocumentStoreError("write failed", path=path)
        self.writes.append((path, data))
        await super().set(path, data)

    async def delete(self, path: str) -> None:
        if self.fail_writes:
            raise DocumentStoreError("delete failed", path=path)
        await super().delete(path)


@pytest.fixture
def store():
    """Document store that records writes and can be made to fail."""
    return FailingDocumentStore()


@pytest.fixture
def report_repository(store):
    return ReportRepository(store)


@pytest.fixture
def connection_repository(store):
    return ConnectionRepository(store)


@pytest.fixture
def notifier():
    return Notifier()


# ==================== HTTP FIXTURES ====================


async def header_principal(
    x_user_email: Annotated[str | None, Header()] = None,
) -> UserPrincipal | None:
    """Test principal taken from the X-User-Email header instead of a token."""
    if not x_user_email:
        return None
    return build_principal(x_user_email)


@pytest.fixture
def app():
    """Fresh application instance (lifespan runs inside the client context)."""
    from src.main import create_app

    app = create_app()
    app.dependency_overrides[get_current_user_optional] = header_principal
    return app


@pytest.fixture
def token_app():
    """Application instance that verifies real Bearer tokens."""
    from src.main import create_app

    return create_app()


@pytest.fixture
def client(app):
    """Test client signed in as a regular agent."""
    with TestClient(app, headers={"X-User-Email": AGENT_EMAIL}) as test_client:
        yield test_client


@pytest.fixture
def admin_client(app):
    """Test client signed in as an admin."""
    with TestClient(app, headers={"X-User-Email": ADMIN_EMAIL}) as test_client:
        yield test_client
