from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from models.records import ROLE_AR_TO_EN, ROLE_EN_TO_AR, UserRole, normalize_role
from services.auth import AuthContext
from services.errors import PermissionDeniedError

EMPLOYEE = {"firstname": "Lotfi", "lastname": "Gharbi", "role": "operator", "hireDate": "2023-10-01"}
PRICE_SHEET = {
    "millingPricePerKg": 1,
    "oilClientSellingPricePerKg": 1,
    "oilExportSellingPricePerKg": 1,
    "oliveBuyingPricePerKg": 1,
}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("admin", UserRole.admin),
        (" Manager ", UserRole.manager),
        ("مدير", UserRole.manager),
        ("مشغل", UserRole.employee),
        ("ماسح", UserRole.scanner),
        ("مسؤول", UserRole.admin),
        ("مدير النظام", UserRole.admin),
        (UserRole.scanner, UserRole.scanner),
    ],
)
def test_normalize_role(raw, expected: UserRole) -> None:
    assert normalize_role(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "owner", "مالك"])
def test_normalize_role_rejects_unknown(raw) -> None:
    assert normalize_role(raw) is None


def test_every_role_has_an_arabic_label_that_maps_back() -> None:
    for role in UserRole:
        assert ROLE_AR_TO_EN[ROLE_EN_TO_AR[role]] == role


def test_require_role() -> None:
    admin = AuthContext(user_id=1, email="a@mill.test", role=UserRole.admin)
    employee = AuthContext(user_id=2, email="e@mill.test", role=UserRole.employee)

    admin.require_role([UserRole.manager])
    with pytest.raises(PermissionDeniedError):
        employee.require_role([UserRole.manager])


def test_employee_writes_need_manager(api_client: TestClient, auth_headers, manager_headers) -> None:
    denied = api_client.post("/api/employees", json=EMPLOYEE, headers=auth_headers)
    assert denied.status_code == 403
    assert "requires manager" in denied.json()["detail"]

    created = api_client.post("/api/employees", json=EMPLOYEE, headers=manager_headers)
    assert created.status_code == 201
    employee = created.json()
    assert employee["active"] is True

    deactivated = api_client.put(f"/api/employees/{employee['id']}", json={"active": False}, headers=manager_headers)
    assert deactivated.json()["active"] is False

    everyone = api_client.get("/api/employees", headers=auth_headers).json()
    active = api_client.get("/api/employees", params={"active": "true"}, headers=auth_headers).json()
    assert [item["id"] for item in everyone] == [employee["id"]]
    assert active == []


def test_admin_passes_manager_checks(api_client: TestClient, register_user) -> None:
    admin_headers = register_user(email="root@mill.test", role="مسؤول")

    response = api_client.post(
        "/api/prices",
        json={"date": "2024-11-01", **PRICE_SHEET},
        headers=admin_headers,
    )

    assert response.status_code == 201


def test_price_creation_is_forbidden_for_scanners(api_client: TestClient, register_user) -> None:
    scanner_headers = register_user(email="scan@mill.test", role="ماسح")

    response = api_client.post("/api/prices", json={"date": "2024-11-01", **PRICE_SHEET}, headers=scanner_headers)

    assert response.status_code == 403


def test_missing_employee_is_404(api_client: TestClient, manager_headers) -> None:
    response = api_client.put("/api/employees/404", json={"phone": "1"}, headers=manager_headers)

    assert response.status_code == 404
