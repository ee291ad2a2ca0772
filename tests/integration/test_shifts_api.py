"""Integration tests for shifts, timesheets and material movements"""

import uuid
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from conftest import OWNER_ID, auth
from mining_ledger.infrastructure.database.models import MaterialMovement, Shift, Timesheet

SHIFT_WITH_ENTRIES = {
    "type": "night",
    "date": "2026-03-10",
    "timesheets": [
        {"worker_name": "Farai Moyo", "role": "driller", "hours_worked": 10},
        {"worker_name": "Chipo Ncube", "role": "hauler", "hours_worked": 8},
    ],
    "materials": [{"type": "ore", "quantity": 6.5, "source": "Level 2 drive"}],
}


def test_supervisor_starts_shift_with_entries(client: TestClient, org_id: str, add_member):
    add_member("user-supervisor", "supervisor")

    response = client.post(f"/v1/orgs/{org_id}/shifts", json=SHIFT_WITH_ENTRIES, headers=auth("user-supervisor"))

    assert response.status_code == 201
    data = response.json()
    assert data["type"] == "night"
    assert data["date"] == "2026-03-10"
    assert data["status"] == "open"
    assert data["created_by_id"] == "user-supervisor"
    assert data["supervisor_id"] == "user-supervisor"
    assert sorted(t["worker_name"] for t in data["timesheets"]) == ["Chipo Ncube", "Farai Moyo"]
    assert data["materials"][0]["unit"] == "tonnes"


def test_viewer_cannot_start_shift(client: TestClient, org_id: str, add_member):
    add_member("user-viewer", "viewer")

    response = client.post(f"/v1/orgs/{org_id}/shifts", json={}, headers=auth("user-viewer"))

    assert response.status_code == 403


def test_entry_failure_leaves_orphan_shift(client: TestClient, db: Session, org_id: str):
    """The shift commit survives when its entries cannot be written"""
    with patch(
        "mining_ledger.infrastructure.database.repositories.ShiftRepository.add_materials",
        side_effect=RuntimeError("disk full"),
    ):
        response = client.post(f"/v1/orgs/{org_id}/shifts", json=SHIFT_WITH_ENTRIES, headers=auth(OWNER_ID))

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "PartialWriteError"

    orphan = db.query(Shift).filter(Shift.id == uuid.UUID(data["orphan_id"])).one()
    assert db.query(Timesheet).filter(Timesheet.shift_id == orphan.id).count() == 0
    assert db.query(MaterialMovement).count() == 0

    listed = client.get(f"/v1/orgs/{org_id}/shifts", headers=auth(OWNER_ID)).json()
    assert [s["id"] for s in listed] == [data["orphan_id"]]


def test_creator_or_manager_updates_shift(client: TestClient, org_id: str, add_member):
    add_member("user-miner")
    add_member("user-miner-2")
    shift = client.post(f"/v1/orgs/{org_id}/shifts", json={"type": "day"}, headers=auth("user-miner")).json()
    path = f"/v1/orgs/{org_id}/shifts/{shift['id']}"

    assert client.patch(path, json={"status": "submitted"}, headers=auth("user-miner-2")).status_code == 403

    submitted = client.patch(path, json={"status": "submitted"}, headers=auth("user-miner"))
    assert submitted.status_code == 200
    assert submitted.json()["status"] == "submitted"

    approved = client.patch(path, json={"status": "approved"}, headers=auth(OWNER_ID))
    assert approved.json()["status"] == "approved"


def test_add_entries_to_existing_shift(client: TestClient, org_id: str, add_member):
    add_member("user-viewer", "viewer")
    shift = client.post(f"/v1/orgs/{org_id}/shifts", json={}, headers=auth(OWNER_ID)).json()

    timesheet = client.post(
        f"/v1/orgs/{org_id}/shifts/{shift['id']}/timesheets",
        json={"worker_name": "Tendai Dube", "hours_worked": 12},
        headers=auth("user-viewer"),
    )
    material = client.post(
        f"/v1/orgs/{org_id}/shifts/{shift['id']}/materials",
        json={"type": "waste", "quantity": 3},
        headers=auth(OWNER_ID),
    )

    assert timesheet.status_code == 201
    assert material.status_code == 201
    listed = client.get(f"/v1/orgs/{org_id}/shifts", headers=auth(OWNER_ID)).json()
    assert len(listed[0]["timesheets"]) == 1
    assert listed[0]["materials"][0]["type"] == "waste"


def test_entries_for_another_orgs_shift_not_found(client: TestClient, org_id: str):
    other = client.post("/v1/orgs", json={"name": "Other Mine"}, headers=auth(OWNER_ID)).json()["id"]
    shift = client.post(f"/v1/orgs/{other}/shifts", json={}, headers=auth(OWNER_ID)).json()

    response = client.post(
        f"/v1/orgs/{org_id}/shifts/{shift['id']}/timesheets",
        json={"worker_name": "Tendai Dube", "hours_worked": 12},
        headers=auth(OWNER_ID),
    )

    assert response.status_code == 404
