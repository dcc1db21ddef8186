"""Shared fixtures for the EnglishMate test suite."""
import os

import httpx
import pytest

import sessions


@pytest.fixture(autouse=True)
def fresh_sessions():
    sessions.clear_sessions()
    yield
    sessions.clear_sessions()


@pytest.fixture()
def mock_upstream(monkeypatch):
    """Route every outbound httpx.AsyncClient call through `handler`.

    Usage:
        mock_upstream(lambda request: httpx.Response(200, json={...}))
    """
    real_client = httpx.AsyncClient

    def _install(handler):
        def _client(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(handler)
            return real_client(*args, **kwargs)
        monkeypatch.setattr(httpx, "AsyncClient", _client)

    return _install


@pytest.fixture()
def cohere_key(monkeypatch):
    monkeypatch.setenv("COHERE_API_KEY", "test-key")
    return "test-key"


@pytest.fixture(scope="session")
def base_url():
    return os.environ.get("ENGLISHMATE_URL", "http://localhost:8847")
