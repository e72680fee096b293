from __future__ import annotations

import httpx
import pytest

from cli.client import ApiClient, ApiError
from cli.config import CLIConfig, load_config
from cli.session import AuthSession
from models.records import UserRole


def _client(handler, token: str | None = None) -> ApiClient:
    return ApiClient(CLIConfig(base_url="http://mill.test", token=token), transport=httpx.MockTransport(handler))


def test_requests_are_sent_under_api_prefix_with_bearer_token() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"ok": True})

    client = _client(handler, token="abc")

    assert client.get("/clients", params={"page": 2, "search": None}) == {"ok": True}
    assert seen["url"] == "http://mill.test/api/clients?page=2"
    assert seen["auth"] == "Bearer abc"


def test_no_content_returns_none() -> None:
    client = _client(lambda request: httpx.Response(204))

    assert client.delete("/clients/1") is None


def test_error_detail_is_surfaced() -> None:
    client = _client(lambda request: httpx.Response(404, json={"detail": "Client not found"}))

    with pytest.raises(ApiError) as excinfo:
        client.get("/clients/99")

    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Client not found"
    assert excinfo.value.is_route_miss is True


def test_plain_text_error_body() -> None:
    client = _client(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(ApiError) as excinfo:
        client.post("/batches", {"clientId": 1})

    assert excinfo.value.message == "boom"
    assert excinfo.value.is_route_miss is False


def test_login_replaces_session() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/auth/login"
        return httpx.Response(200, json={"token": "jwt", "user": {"id": 3, "email": "m@mill.test", "role": "مدير"}})

    client = _client(handler)
    session = client.login("m@mill.test", "pw")

    assert client.session is session
    assert session.is_authenticated
    assert session.role == UserRole.manager
    assert session.headers() == {"Authorization": "Bearer jwt"}


def test_anonymous_session_sends_no_header() -> None:
    assert AuthSession().headers() == {}
    assert AuthSession().is_authenticated is False


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://mill.local:9000/")
    monkeypatch.setenv("OLIVE_MILL_TOKEN", "  from-env ")
    monkeypatch.setenv("CLI_TIMEOUT", "not-a-number")

    config = load_config()

    assert config.base_url == "http://mill.local:9000"
    assert config.api_url == "http://mill.local:9000/api"
    assert config.token == "from-env"
    assert config.timeout == 30.0


def test_load_config_explicit_values_win(monkeypatch) -> None:
    monkeypatch.setenv("OLIVE_MILL_TOKEN", "from-env")

    config = load_config(base_url="http://other", token="flag", timeout=5)

    assert (config.base_url, config.token, config.timeout) == ("http://other", "flag", 5)
