from __future__ import annotations

from fastapi.testclient import TestClient


def test_create_batch_as_ticket(api_client: TestClient, auth_headers, make_batch) -> None:
    batch = make_batch(weightIn=1500, weightOut=300, unitPrice=2)

    assert batch["status"] == "received"
    assert batch["ticket_status"] == "draft"
    assert batch["ticket_code"] == f"TKT{batch['id']:06d}"
    assert batch["total_amount"] == 2400.0
    assert batch["client"]["firstname"] == "Salah"
    assert batch["processing_decisions"] == []


def test_create_batch_validates_input(api_client: TestClient, auth_headers, make_client) -> None:
    client = make_client()

    unknown_client = api_client.post(
        "/api/batches",
        json={"clientId": 999, "netWeight": 10, "numberOfBoxes": 1},
        headers=auth_headers,
    )
    assert unknown_client.status_code == 404
    assert unknown_client.json()["detail"] == "Client not found"

    bad_weights = api_client.post(
        "/api/batches",
        json={"clientId": client["id"], "netWeight": 10, "numberOfBoxes": 1, "weightIn": 100, "weightOut": 100},
        headers=auth_headers,
    )
    assert bad_weights.status_code == 400

    missing_boxes = api_client.post(
        "/api/batches",
        json={"clientId": client["id"], "netWeight": 10},
        headers=auth_headers,
    )
    assert missing_boxes.status_code == 400
    assert "numberOfBoxes" in missing_boxes.json()["detail"]


def test_update_batch_accepts_either_key_style(api_client: TestClient, auth_headers, make_batch) -> None:
    batch = make_batch(weightIn=1500)

    camel = api_client.put(f"/api/batches/{batch['id']}", json={"weightOut": 400, "netWeight": 1100}, headers=auth_headers)
    assert camel.status_code == 200
    assert camel.json()["weight_out"] == 400
    assert camel.json()["net_weight"] == 1100

    snake = api_client.put(
        f"/api/batches/{batch['id']}",
        json={"number_of_boxes": 37, "is_paid": True, "status": "completed"},
        headers=auth_headers,
    )
    assert snake.status_code == 200
    body = snake.json()
    assert body["number_of_boxes"] == 37
    assert body["is_paid"] is True
    assert body["date_paid"] is not None
    assert body["ticket_status"] == "paid"

    invalid = api_client.put(f"/api/batches/{batch['id']}", json={"weightOut": 1600}, headers=auth_headers)
    assert invalid.status_code == 400
    assert invalid.json()["detail"] == "weight_out must be less than weight_in"


def test_list_filters_by_status_and_client(api_client: TestClient, auth_headers, make_client, make_batch) -> None:
    first = make_client(firstname="First")
    second = make_client(firstname="Second")
    make_batch(client_id=first["id"])
    done = make_batch(client_id=second["id"])
    api_client.put(f"/api/batches/{done['id']}/status", json={"status": "completed"}, headers=auth_headers)

    completed = api_client.get("/api/batches", params={"status": "completed"}, headers=auth_headers).json()
    assert [item["id"] for item in completed["batches"]] == [done["id"]]

    by_client = api_client.get("/api/batches", params={"clientId": first["id"]}, headers=auth_headers).json()
    assert by_client["pagination"]["total"] == 1
    assert by_client["batches"][0]["client_id"] == first["id"]


def test_delete_batch(api_client: TestClient, auth_headers, make_batch) -> None:
    batch = make_batch()

    deleted = api_client.delete(f"/api/batches/{batch['id']}", headers=auth_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True, "id": batch["id"]}
    assert api_client.get(f"/api/batches/{batch['id']}", headers=auth_headers).status_code == 404


def test_batch_with_oil_cannot_be_deleted(api_client: TestClient, auth_headers, make_batch) -> None:
    batch = make_batch()
    api_client.post("/api/oil-batches", json={"weight": 200, "batchId": batch["id"]}, headers=auth_headers)

    response = api_client.delete(f"/api/batches/{batch['id']}", headers=auth_headers)

    assert response.status_code == 400


def test_processing_decision_moves_batch_in_process(api_client: TestClient, auth_headers, make_batch) -> None:
    batch = make_batch()

    response = api_client.post(
        "/api/processing-decisions",
        json={"batchId": batch["id"], "type": "milling", "unitPrice": 3},
        headers=auth_headers,
    )

    assert response.status_code == 201
    decision = response.json()
    assert decision["type"] == "milling"
    assert decision["batch"]["status"] == "in_process"

    refreshed = api_client.get(f"/api/batches/{batch['id']}", headers=auth_headers).json()
    assert refreshed["status"] == "in_process"
    assert [item["id"] for item in refreshed["processing_decisions"]] == [decision["id"]]

    listed = api_client.get("/api/processing-decisions", headers=auth_headers).json()
    assert listed[0]["batch"]["id"] == batch["id"]
    assert api_client.get(f"/api/processing-decisions/{decision['id']}", headers=auth_headers).status_code == 200


def test_processing_decision_rejections(api_client: TestClient, auth_headers, make_batch) -> None:
    batch = make_batch()
    api_client.put(f"/api/batches/{batch['id']}/status", json={"status": "completed"}, headers=auth_headers)

    processed = api_client.post(
        "/api/processing-decisions",
        json={"batchId": batch["id"], "type": "selling"},
        headers=auth_headers,
    )
    assert processed.status_code == 400
    assert processed.json()["detail"] == "Batch already processed"

    missing = api_client.post(
        "/api/processing-decisions",
        json={"batchId": 999, "type": "selling"},
        headers=auth_headers,
    )
    assert missing.status_code == 404

    bad_type = api_client.post(
        "/api/processing-decisions",
        json={"batchId": batch["id"], "type": "export"},
        headers=auth_headers,
    )
    assert bad_type.status_code == 400
