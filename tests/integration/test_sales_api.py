"""Integration tests for sales transactions"""

import pytest
from fastapi.testclient import TestClient
from conftest import OWNER_ID, auth


def test_miner_records_pending_sale(client: TestClient, org_id: str, add_member):
    add_member("user-miner")

    response = client.post(
        f"/v1/orgs/{org_id}/sales",
        json={
            "buyer_name": "Fidelity Printers & Refiners",
            "quantity": 12.5,
            "price_per_unit": 64.2,
            "receipt_number": "FPR-1001",
        },
        headers=auth("user-miner"),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["source"] == "fidelity"
    assert data["total_value"] == 802.5
    assert data["reference_id"] == "FPR-1001"
    assert data["mineral_type"] == "gold"


def test_viewer_and_supervisor_cannot_record_sales(client: TestClient, org_id: str, add_member):
    add_member("user-viewer", "viewer")
    add_member("user-supervisor", "supervisor")
    body = {"quantity": 1, "price_per_unit": 60}

    for user in ("user-viewer", "user-supervisor"):
        response = client.post(f"/v1/orgs/{org_id}/sales", json=body, headers=auth(user))
        assert response.status_code == 403


def test_invalid_quantity_rejected(client: TestClient, org_id: str):
    response = client.post(
        f"/v1/orgs/{org_id}/sales",
        json={"quantity": 0, "price_per_unit": 60},
        headers=auth(OWNER_ID),
    )

    assert response.status_code == 422


def test_sales_are_tenant_scoped(client: TestClient, org_id: str):
    client.post(f"/v1/orgs/{org_id}/sales", json={"quantity": 1, "price_per_unit": 60}, headers=auth(OWNER_ID))
    other = client.post("/v1/orgs", json={"name": "Other Mine"}, headers=auth(OWNER_ID)).json()["id"]

    assert len(client.get(f"/v1/orgs/{org_id}/sales", headers=auth(OWNER_ID)).json()) == 1
    assert client.get(f"/v1/orgs/{other}/sales", headers=auth(OWNER_ID)).json() == []


def test_admin_flags_sale(client: TestClient, org_id: str, add_member):
    add_member("user-miner")
    sale = client.post(
        f"/v1/orgs/{org_id}/sales",
        json={"quantity": 10, "price_per_unit": 60},
        headers=auth("user-miner"),
    ).json()

    denied = client.patch(
        f"/v1/orgs/{org_id}/sales/{sale['id']}/status",
        json={"status": "flagged"},
        headers=auth("user-miner"),
    )
    assert denied.status_code == 403

    response = client.patch(
        f"/v1/orgs/{org_id}/sales/{sale['id']}/status",
        json={"status": "flagged"},
        headers=auth(OWNER_ID),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "flagged"


@pytest.mark.parametrize(
    "body",
    [
        '{"quantity": Infinity, "price_per_unit": 60}',
        '{"quantity": 10, "price_per_unit": NaN}',
        '{"quantity": 1e308, "price_per_unit": 60}',
        '{"quantity": 10, "price_per_unit": 1e300}',
    ],
)
def test_unbounded_sale_rejected_and_score_unaffected(client: TestClient, org_id: str, body: str):
    response = client.post(
        f"/v1/orgs/{org_id}/sales",
        content=body,
        headers={**auth(OWNER_ID), "Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert client.get(f"/v1/orgs/{org_id}/sales", headers=auth(OWNER_ID)).json() == []
    health = client.get(f"/v1/orgs/{org_id}/financial-health", headers=auth(OWNER_ID))
    assert health.status_code == 200
    assert health.json()["score"] == 50


def test_largest_allowed_sale_still_scores(client: TestClient, org_id: str):
    response = client.post(
        f"/v1/orgs/{org_id}/sales",
        json={"quantity": 1_000_000, "price_per_unit": 10_000},
        headers=auth(OWNER_ID),
    )

    assert response.status_code == 201
    health = client.get(f"/v1/orgs/{org_id}/financial-health", headers=auth(OWNER_ID)).json()
    assert health["score"] == 82
