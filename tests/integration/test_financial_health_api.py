"""Integration tests for financial health scoring and its 24h cache"""

import uuid
from datetime import timedelta
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from conftest import OWNER_ID, auth
from mining_ledger.domain.models import SalesStats
from mining_ledger.domain.scoring import score_sales
from mining_ledger.infrastructure.database.repositories import CreditScoreRepository
from mining_ledger.utils.date_utils import utc_now


def _record_sale(client: TestClient, org_id: str, grams: float, price: float) -> dict:
    response = client.post(
        f"/v1/orgs/{org_id}/sales",
        json={"quantity": grams, "price_per_unit": price},
        headers=auth(OWNER_ID),
    )
    assert response.status_code == 201
    return response.json()


def test_no_sales_scores_fifty(client: TestClient, org_id: str):
    response = client.get(f"/v1/orgs/{org_id}/financial-health", headers=auth(OWNER_ID))

    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 50
    assert data["grade"] == "D"
    assert data["cached"] is False
    assert data["model_version"] == "v1.0"
    assert [f["name"] for f in data["factors"]] == ["Revenue Volume", "Transaction Frequency"]


def test_score_reflects_sales(client: TestClient, org_id: str):
    """$2500 over 3 sales: 50 + 25 + 6 = 81, grade B"""
    _record_sale(client, org_id, 10, 100)
    _record_sale(client, org_id, 10, 100)
    _record_sale(client, org_id, 5, 100)

    data = client.get(f"/v1/orgs/{org_id}/financial-health", headers=auth(OWNER_ID)).json()

    assert data["score"] == 81
    assert data["grade"] == "B"
    assert data["factors"][0]["explanation"] == "Total verified revenue of $2500"
    assert data["factors"][1]["explanation"] == "3 recorded sales transactions"


def test_second_request_within_window_is_cached(client: TestClient, org_id: str):
    first = client.get(f"/v1/orgs/{org_id}/financial-health", headers=auth(OWNER_ID)).json()
    _record_sale(client, org_id, 50, 100)

    second = client.get(f"/v1/orgs/{org_id}/financial-health", headers=auth(OWNER_ID)).json()

    assert second["cached"] is True
    assert second["id"] == first["id"]
    assert second["calculated_at"] == first["calculated_at"]
    assert second["score"] == 50
    history = client.get(f"/v1/orgs/{org_id}/credit-score/history", headers=auth(OWNER_ID)).json()
    assert len(history["scores"]) == 1


def test_refresh_bypasses_cache(client: TestClient, org_id: str):
    first = client.get(f"/v1/orgs/{org_id}/financial-health", headers=auth(OWNER_ID)).json()
    _record_sale(client, org_id, 50, 100)

    refreshed = client.get(
        f"/v1/orgs/{org_id}/financial-health",
        params={"refresh": "true"},
        headers=auth(OWNER_ID),
    ).json()

    assert refreshed["cached"] is False
    assert refreshed["id"] != first["id"]
    assert refreshed["score"] == 82


def test_calculate_always_recomputes(client: TestClient, org_id: str, add_member):
    add_member("user-viewer", "viewer")

    first = client.post(f"/v1/orgs/{org_id}/credit-score/calculate", headers=auth("user-viewer"))
    second = client.post(f"/v1/orgs/{org_id}/credit-score/calculate", headers=auth("user-viewer"))

    assert first.status_code == 200
    assert second.json()["cached"] is False
    assert second.json()["id"] != first.json()["id"]


def test_stale_snapshot_is_recomputed(client: TestClient, db: Session, org_id: str):
    stale = CreditScoreRepository(db).create_snapshot(
        uuid.UUID(org_id),
        score_sales(SalesStats()),
        calculated_at=utc_now() - timedelta(hours=25),
    )
    db.commit()
    _record_sale(client, org_id, 10, 100)

    data = client.get(f"/v1/orgs/{org_id}/financial-health", headers=auth(OWNER_ID)).json()

    assert data["cached"] is False
    assert data["id"] != str(stale.id)
    assert data["score"] == 62


def test_flagged_sales_do_not_count(client: TestClient, org_id: str):
    _record_sale(client, org_id, 10, 100)
    flagged = _record_sale(client, org_id, 10, 100)
    client.patch(
        f"/v1/orgs/{org_id}/sales/{flagged['id']}/status",
        json={"status": "flagged"},
        headers=auth(OWNER_ID),
    )

    data = client.post(f"/v1/orgs/{org_id}/credit-score/calculate", headers=auth(OWNER_ID)).json()

    assert data["score"] == 62
    assert data["grade"] == "C"


def test_latest_score_without_computing(client: TestClient, org_id: str):
    empty = client.get(f"/v1/orgs/{org_id}/credit-score", headers=auth(OWNER_ID))
    assert empty.status_code == 200
    assert empty.json() == {"message": "No score calculated yet", "score": None}

    computed = client.post(f"/v1/orgs/{org_id}/credit-score/calculate", headers=auth(OWNER_ID)).json()

    latest = client.get(f"/v1/orgs/{org_id}/credit-score", headers=auth(OWNER_ID)).json()
    assert latest["id"] == computed["id"]
    assert latest["score"] == 50


def test_history_most_recent_first(client: TestClient, org_id: str):
    first = client.post(f"/v1/orgs/{org_id}/credit-score/calculate", headers=auth(OWNER_ID)).json()
    _record_sale(client, org_id, 10, 100)
    second = client.post(f"/v1/orgs/{org_id}/credit-score/calculate", headers=auth(OWNER_ID)).json()

    history = client.get(f"/v1/orgs/{org_id}/credit-score/history", headers=auth(OWNER_ID)).json()

    assert history["org_id"] == org_id
    assert [s["id"] for s in history["scores"]] == [second["id"], first["id"]]


def test_served_scores_are_counted(client: TestClient, org_id: str):
    client.get(f"/v1/orgs/{org_id}/financial-health", headers=auth(OWNER_ID))
    client.get(f"/v1/orgs/{org_id}/financial-health", headers=auth(OWNER_ID))

    metrics = client.get("/metrics").text
    assert 'mining_score_requests_total{source="cache"}' in metrics
    assert 'mining_score_requests_total{source="computed"}' in metrics
    assert 'mining_credit_score_grade_total{grade="D"}' in metrics
