from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from cli.config import CLIConfig
from cli.session import AuthSession

logger = logging.getLogger(__name__)

ROUTE_MISS_STATUSES = frozenset({404, 405})


class ApiError(Exception):
    """A non-2xx response (or transport failure) from the mill API."""

    def __init__(self, status_code: int, message: str, url: str) -> None:
        super().__init__(f"{status_code} {message} ({url})")
        self.status_code = status_code
        self.message = message
        self.url = url

    @property
    def is_route_miss(self) -> bool:
        """True when the server has no handler for the method/path pair."""
        return self.status_code in ROUTE_MISS_STATUSES


class ApiClient:
    """JSON client for the mill API: ``get/post/put/delete`` raise on non-2xx."""

    def __init__(
        self,
        config: CLIConfig,
        session: Optional[AuthSession] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self.session = session or AuthSession(token=config.token)
        self._client = httpx.Client(
            base_url=config.api_url,
            timeout=config.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        query = {key: value for key, value in (params or {}).items() if value is not None}
        try:
            response = self._client.request(
                method,
                path,
                json=json,
                params=query or None,
                headers=self.session.headers(),
            )
        except httpx.HTTPError as exc:
            raise ApiError(0, f"Request failed: {exc}", f"{self._config.api_url}{path}") from exc

        if response.is_error:
            raise ApiError(response.status_code, self._error_detail(response), str(response.url))
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, json=body)

    def put(self, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("PUT", path, json=body)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def login(self, email: str, password: str) -> AuthSession:
        payload = self.post("/auth/login", {"email": email, "password": password})
        self.session = AuthSession(token=payload["token"], user=payload.get("user") or {})
        logger.info("Logged in", extra={"user_id": self.session.user.get("id")})
        return self.session

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text.strip() or response.reason_phrase
        if isinstance(data, dict):
            detail = data.get("detail") or data.get("error")
            if detail:
                return str(detail)
        return response.reason_phrase
