from __future__ import annotations

import json
from typing import Dict, List, Tuple

import httpx
import pytest

from cli.client import ApiClient, ApiError
from cli.config import CLIConfig
from cli.fallback import TICKET_UPDATE_ATTEMPTS, update_ticket_with_fallback
from cli.tickets import build_ticket_update

BASE_URL = "http://mill.test"


def _recording_client(statuses: List[int]) -> Tuple[ApiClient, List[Tuple[str, str, Dict]]]:
    """Client whose n-th request answers ``statuses[n]``; records every call."""
    calls: List[Tuple[str, str, Dict]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.path, json.loads(request.content or b"{}")))
        status_code = statuses[len(calls) - 1]
        if status_code < 400:
            return httpx.Response(status_code, json={"id": 7, "status": "in_process"})
        return httpx.Response(status_code, json={"detail": f"failed with {status_code}"})

    client = ApiClient(CLIConfig(base_url=BASE_URL, token="tok"), transport=httpx.MockTransport(handler))
    return client, calls


def _expected_route(index: int) -> Tuple[str, str]:
    attempt = TICKET_UPDATE_ATTEMPTS[index]
    return attempt.method, "/api" + attempt.url(7)


def test_attempt_table_order() -> None:
    shapes = [(attempt.method, attempt.path, attempt.id_in_body, attempt.method_override) for attempt in TICKET_UPDATE_ATTEMPTS]

    assert shapes == [
        ("POST", "/batches/{id}", False, "PATCH"),
        ("PUT", "/batches/{id}", False, None),
        ("POST", "/batches/{id}", False, "PUT"),
        ("POST", "/batches/update/{id}", False, None),
        ("POST", "/batches/{id}/update", False, None),
        ("POST", "/batches/update", True, None),
        ("POST", "/batches", True, "PATCH"),
        ("PUT", "/batches", True, None),
    ]


@pytest.mark.parametrize("misses", [0, 1, 3, 7])
def test_stops_at_first_routed_attempt(misses: int) -> None:
    statuses = [404 if index % 2 else 405 for index in range(misses)] + [200]
    client, calls = _recording_client(statuses)

    result = update_ticket_with_fallback(client, 7, {"net_weight": 900})

    assert result == {"id": 7, "status": "in_process"}
    assert len(calls) == misses + 1
    assert [(method, path) for method, path, _ in calls] == [_expected_route(i) for i in range(misses + 1)]


def test_body_shapes_carry_id_and_method_override() -> None:
    client, calls = _recording_client([404] * 7 + [200])

    update_ticket_with_fallback(client, 7, {"net_weight": 900})

    bodies = [body for _, _, body in calls]
    assert bodies[0] == {"net_weight": 900, "_method": "PATCH"}
    assert bodies[1] == {"net_weight": 900}
    assert bodies[2]["_method"] == "PUT"
    assert bodies[5] == {"id": 7, "net_weight": 900}
    assert bodies[6] == {"id": 7, "net_weight": 900, "_method": "PATCH"}
    assert bodies[7] == {"id": 7, "net_weight": 900}


@pytest.mark.parametrize("status_code", [400, 401, 403, 500])
def test_other_errors_stop_immediately(status_code: int) -> None:
    client, calls = _recording_client([404, status_code, 200])

    with pytest.raises(ApiError) as excinfo:
        update_ticket_with_fallback(client, 7, {"net_weight": 900})

    assert excinfo.value.status_code == status_code
    assert excinfo.value.message == f"failed with {status_code}"
    assert len(calls) == 2


def test_exhaustion_raises_last_miss() -> None:
    client, calls = _recording_client([404] * 7 + [405])

    with pytest.raises(ApiError) as excinfo:
        update_ticket_with_fallback(client, 7, {"net_weight": 900})

    assert len(calls) == len(TICKET_UPDATE_ATTEMPTS)
    assert excinfo.value.status_code == 405
    assert excinfo.value.url.endswith("/api/batches")


def test_single_attempt_miss_is_raised() -> None:
    client, calls = _recording_client([404])

    with pytest.raises(ApiError) as excinfo:
        update_ticket_with_fallback(client, 7, {"net_weight": 900}, attempts=TICKET_UPDATE_ATTEMPTS[1:2])

    assert [call[:2] for call in calls] == [("PUT", "/api/batches/7")]
    assert excinfo.value.status_code == 404


def test_empty_attempt_list_is_rejected() -> None:
    client, calls = _recording_client([])

    with pytest.raises(ValueError):
        update_ticket_with_fallback(client, 7, {"net_weight": 900}, attempts=())

    assert calls == []


def test_transport_failure_is_not_a_route_miss() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = ApiClient(CLIConfig(base_url=BASE_URL), transport=httpx.MockTransport(handler))

    with pytest.raises(ApiError) as excinfo:
        update_ticket_with_fallback(client, 7, {"net_weight": 900})

    assert excinfo.value.status_code == 0
    assert excinfo.value.is_route_miss is False


def test_live_api_answers_the_put_route(auth_headers, make_batch, app_transport) -> None:
    transport, seen = app_transport
    batch = make_batch(weightIn=1500, weightOut=300)
    token = auth_headers["Authorization"].split(" ", 1)[1]
    client = ApiClient(CLIConfig(base_url="http://testserver", token=token), transport=transport)
    payload = build_ticket_update(weight_in=1500, weight_out=350, unit_price=2.5, number_of_boxes=42, status="confirmed")

    result = update_ticket_with_fallback(client, batch["id"], payload)

    assert seen == [("POST", 405), ("PUT", 200)]
    assert result["net_weight"] == 1150
    assert result["status"] == "in_process"
    assert result["ticket_status"] == "confirmed"
    assert result["total_amount"] == 2875.0
