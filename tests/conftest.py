"""Shared test fixtures.

Provides a ``test_client`` for FastAPI, mock Supabase clients, and a
``make_gateway`` factory that routes Graph API calls to an in-memory
``httpx.MockTransport`` handler.
"""

import os
from collections.abc import Callable, Generator
from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

# Settings are read at import time; give the required fields a value.
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")

from explorer.services.graph import GraphGateway  # noqa: E402

Handler = Callable[[httpx.Request], httpx.Response]


def chainable_table_mock() -> MagicMock:
    """Return a mock that supports fluent chaining (select/eq/limit/upsert/...)."""
    m = MagicMock()
    for method in ("select", "insert", "upsert", "update", "eq", "limit", "order"):
        getattr(m, method).return_value = m
    return m


@pytest.fixture()
def make_gateway() -> Callable[[Handler], GraphGateway]:
    """Return a factory building a ``GraphGateway`` over a mock transport."""

    def _factory(handler: Handler) -> GraphGateway:
        return GraphGateway(
            access_token="test-token",
            page_id="page-1",
            base_url="https://graph.test",
            api_version="v23.0",
            transport=httpx.MockTransport(handler),
        )

    return _factory


@pytest.fixture()
def mock_supabase_module() -> Generator[MagicMock, None, None]:
    """Patch the Supabase client used by the health router."""
    mock_client = MagicMock()
    table = chainable_table_mock()
    table.execute.return_value = MagicMock(data=[])
    mock_client.table.return_value = table

    with patch("explorer.routers.health.get_supabase", return_value=mock_client):
        yield mock_client


@pytest.fixture()
def mock_supabase_disconnected() -> Generator[MagicMock, None, None]:
    """Patch ``get_supabase`` to simulate a disconnected database."""
    with patch(
        "explorer.routers.health.get_supabase",
        side_effect=Exception("Connection refused"),
    ):
        yield MagicMock()


@pytest.fixture()
def test_client() -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient."""
    from explorer.main import app

    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
