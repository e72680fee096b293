from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from datastore.database import build_default_engine, build_default_session_factory
from settings import get_settings

_CACHES = (get_settings, build_default_engine, build_default_session_factory)


def _clear_caches() -> None:
    for cache in _CACHES:
        cache.cache_clear()


@pytest.fixture
def api_client(tmp_path, monkeypatch) -> Iterator[TestClient]:
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'mill.db'}")
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret")
    monkeypatch.setenv("MILL_TIMEZONE", "UTC")
    _clear_caches()

    app = create_app()
    with TestClient(app) as client:
        yield client

    build_default_engine().dispose()
    _clear_caches()


@pytest.fixture
def register_user(api_client: TestClient) -> Callable[..., Dict[str, str]]:
    """Register and log in a user; returns ready-to-use request headers."""

    def _register(email: str = "operator@mill.test", password: str = "secret", role: str = "employee") -> Dict[str, str]:
        response = api_client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "role": role},
        )
        assert response.status_code == 201, response.text
        login = api_client.post("/api/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        return {"Authorization": f"Bearer {login.json()['token']}"}

    return _register


@pytest.fixture
def auth_headers(register_user) -> Dict[str, str]:
    return register_user()


@pytest.fixture
def manager_headers(register_user) -> Dict[str, str]:
    return register_user(email="manager@mill.test", role="manager")


@pytest.fixture
def make_client(api_client: TestClient, auth_headers: Dict[str, str]) -> Callable[..., Dict]:
    def _make(firstname: str = "Salah", lastname: str = "Ben Ali", phone: str = "+216 20 000 000") -> Dict:
        response = api_client.post(
            "/api/clients",
            json={"firstname": firstname, "lastname": lastname, "phone": phone},
            headers=auth_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_batch(api_client: TestClient, auth_headers: Dict[str, str], make_client) -> Callable[..., Dict]:
    def _make(client_id: int | None = None, **fields) -> Dict:
        body = {
            "clientId": client_id if client_id is not None else make_client()["id"],
            "netWeight": 1200,
            "numberOfBoxes": 40,
        }
        body.update(fields)
        response = api_client.post("/api/batches", json=body, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def app_transport(api_client: TestClient) -> Tuple[httpx.MockTransport, List[Tuple[str, int]]]:
    """httpx transport that forwards requests into the app; records (method, status)."""
    seen: List[Tuple[str, int]] = []

    def forward(request: httpx.Request) -> httpx.Response:
        response = api_client.request(
            request.method,
            str(request.url),
            content=request.content,
            headers={
                "Authorization": request.headers.get("Authorization", ""),
                "Content-Type": "application/json",
            },
        )
        seen.append((request.method, response.status_code))
        return httpx.Response(
            response.status_code,
            content=response.content,
            headers={"Content-Type": response.headers.get("content-type", "application/json")},
        )

    return httpx.MockTransport(forward), seen
