from __future__ import annotations

from datetime import date, timedelta

from fastapi.testclient import TestClient

PRICE_SHEET = {
    "millingPricePerKg": 2,
    "oilClientSellingPricePerKg": 14,
    "oilExportSellingPricePerKg": 18,
    "oliveBuyingPricePerKg": 3,
}


def test_price_sheets(api_client: TestClient, manager_headers) -> None:
    assert api_client.get("/api/prices", params={"latest": "true"}, headers=manager_headers).status_code == 404

    for day in ("2024-11-01", "2024-11-05"):
        response = api_client.post("/api/prices", json={"date": day, **PRICE_SHEET}, headers=manager_headers)
        assert response.status_code == 201

    latest = api_client.get("/api/prices", params={"latest": "true"}, headers=manager_headers).json()
    assert latest["date"] == "2024-11-05"

    listed = api_client.get("/api/prices", headers=manager_headers).json()
    assert [item["date"] for item in listed] == ["2024-11-05", "2024-11-01"]

    by_day = api_client.get("/api/prices/2024-11-01", headers=manager_headers)
    assert by_day.status_code == 200
    assert by_day.json()["oil_export_selling_price_per_kg"] == 18
    assert api_client.get("/api/prices/2024-11-02", headers=manager_headers).status_code == 404

    duplicate = api_client.post("/api/prices", json={"date": "2024-11-01", **PRICE_SHEET}, headers=manager_headers)
    assert duplicate.status_code == 400


def test_decision_can_reference_price_sheet(api_client: TestClient, auth_headers, manager_headers, make_batch) -> None:
    price = api_client.post("/api/prices", json={"date": "2024-11-01", **PRICE_SHEET}, headers=manager_headers).json()
    batch = make_batch()

    response = api_client.post(
        "/api/processing-decisions",
        json={"batchId": batch["id"], "type": "selling", "priceId": price["id"]},
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.json()["price"]["id"] == price["id"]

    missing = api_client.post(
        "/api/processing-decisions",
        json={"batchId": make_batch()["id"], "type": "selling", "priceId": 999},
        headers=auth_headers,
    )
    assert missing.status_code == 404


def _invoice(api_client: TestClient, headers, client_id: int, amount: int = 1000, **fields) -> dict:
    body = {"clientId": client_id, "amount": amount, "dueDate": (date.today() + timedelta(days=30)).isoformat()}
    body.update(fields)
    response = api_client.post("/api/invoices", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_invoice_lifecycle_and_payments(api_client: TestClient, auth_headers, make_client, make_batch) -> None:
    client = make_client()
    batch = make_batch(client_id=client["id"])
    invoice = _invoice(api_client, auth_headers, client["id"], amount=1000, batchId=batch["id"], notes="Milling")

    assert invoice["status"] == "draft"
    assert invoice["amount_paid"] == 0
    assert invoice["client"]["id"] == client["id"]

    sent = api_client.put(f"/api/invoices/{invoice['id']}/status", json={"status": "sent"}, headers=auth_headers)
    assert sent.json()["status"] == "sent"

    partial = api_client.post(
        "/api/payments",
        json={"invoiceId": invoice["id"], "amount": 400, "paymentMethod": "cash"},
        headers=auth_headers,
    )
    assert partial.status_code == 201
    assert partial.json()["invoice"]["status"] == "sent"

    final = api_client.post(
        "/api/payments",
        json={"invoiceId": invoice["id"], "amount": 600, "paymentMethod": "bank_transfer", "reference": "TX-1"},
        headers=auth_headers,
    )
    assert final.json()["invoice"]["status"] == "paid"

    refreshed = api_client.get(f"/api/invoices/{invoice['id']}", headers=auth_headers).json()
    assert refreshed["amount_paid"] == 1000
    assert len(refreshed["payments"]) == 2

    payments = api_client.get("/api/payments", params={"invoiceId": invoice["id"]}, headers=auth_headers).json()
    assert sorted(item["amount"] for item in payments) == [400, 600]

    paid = api_client.get("/api/invoices", params={"status": "paid"}, headers=auth_headers).json()
    assert paid["pagination"]["total"] == 1


def test_invoice_validation(api_client: TestClient, auth_headers, make_client) -> None:
    client = make_client()

    unknown_client = api_client.post(
        "/api/invoices",
        json={"clientId": 404, "amount": 10, "dueDate": date.today().isoformat()},
        headers=auth_headers,
    )
    assert unknown_client.status_code == 404

    overdue = api_client.post(
        "/api/invoices",
        json={"clientId": client["id"], "amount": 10, "dueDate": (date.today() - timedelta(days=2)).isoformat()},
        headers=auth_headers,
    )
    assert overdue.status_code == 400

    zero_payment = api_client.post(
        "/api/payments",
        json={"invoiceId": _invoice(api_client, auth_headers, client["id"])["id"], "amount": 0},
        headers=auth_headers,
    )
    assert zero_payment.status_code == 400

    assert api_client.post("/api/payments", json={"invoiceId": 999, "amount": 5}, headers=auth_headers).status_code == 404


def test_client_with_invoice_cannot_be_deleted(api_client: TestClient, auth_headers, make_client) -> None:
    client = make_client()
    _invoice(api_client, auth_headers, client["id"])

    assert api_client.delete(f"/api/clients/{client['id']}", headers=auth_headers).status_code == 400
    detail = api_client.get(f"/api/clients/{client['id']}", headers=auth_headers).json()
    assert len(detail["invoices"]) == 1
