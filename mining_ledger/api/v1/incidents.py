"""Safety incident reports"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from mining_ledger.api.v1.schemas import IncidentCreate, IncidentResponse, IncidentUpdate
from mining_ledger.api.dependencies import (
    get_current_user_id,
    get_membership,
    get_org_id,
    get_request_id,
    parse_id,
    unit_of_work,
)
from mining_ledger.domain.exceptions import ResourceNotFoundError
from mining_ledger.domain.membership import require_owner_or_manager
from mining_ledger.domain.models import IncidentStatus
from mining_ledger.infrastructure.database.models import IncidentReport, Membership
from mining_ledger.infrastructure.database.repositories import IncidentRepository
from mining_ledger.infrastructure.database.session import get_db
from mining_ledger.utils.date_utils import utc_now

router = APIRouter()


def _get_incident_or_404(repo: IncidentRepository, org_uuid: uuid.UUID, incident_id: str) -> IncidentReport:
    incident = repo.get_incident(org_uuid, parse_id(incident_id, "incident ID"))
    if not incident:
        raise ResourceNotFoundError("Incident not found")
    return incident


@router.post("/orgs/{org_id}/incidents", response_model=IncidentResponse, status_code=201)
def report_incident(
    body: IncidentCreate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    user_id: str = Depends(get_current_user_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """Any active member may report an incident"""
    fields = body.model_dump(exclude={"date"})
    with unit_of_work(db, get_request_id(request)):
        incident = IncidentRepository(db).create_incident(
            org_uuid,
            reporter_id=user_id,
            date=body.date or utc_now(),
            status=IncidentStatus.OPEN.value,
            **fields,
        )
    return incident


@router.get("/orgs/{org_id}/incidents", response_model=List[IncidentResponse])
def list_incidents(
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return IncidentRepository(db).get_recent(org_uuid)


@router.patch("/orgs/{org_id}/incidents/{incident_id}", response_model=IncidentResponse)
def update_incident(
    incident_id: str,
    body: IncidentUpdate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    user_id: str = Depends(get_current_user_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """Only the reporter or an admin/owner can edit"""
    repo = IncidentRepository(db)
    with unit_of_work(db, get_request_id(request)):
        incident = _get_incident_or_404(repo, org_uuid, incident_id)
        require_owner_or_manager(membership, user_id, incident.reporter_id)
        repo.update(incident, body.model_dump(exclude_none=True))
    return incident


@router.delete("/orgs/{org_id}/incidents/{incident_id}")
def delete_incident(
    incident_id: str,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    user_id: str = Depends(get_current_user_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """Only the reporter or an admin/owner can delete"""
    repo = IncidentRepository(db)
    with unit_of_work(db, get_request_id(request)):
        incident = _get_incident_or_404(repo, org_uuid, incident_id)
        require_owner_or_manager(membership, user_id, incident.reporter_id)
        repo.delete(incident)
    return {"message": "Incident deleted"}
