"""Shifts with their timesheets and material movements"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from mining_ledger.api.v1.schemas import (
    MaterialCreate,
    MaterialResponse,
    ShiftCreate,
    ShiftResponse,
    ShiftUpdate,
    TimesheetCreate,
    TimesheetResponse,
)
from mining_ledger.api.dependencies import (
    get_current_user_id,
    get_membership,
    get_org_id,
    get_request_id,
    parse_id,
    require_roles,
    unit_of_work,
)
from mining_ledger.domain.exceptions import PartialWriteError, ResourceNotFoundError
from mining_ledger.domain.membership import SHIFT_ROLES, require_owner_or_manager
from mining_ledger.domain.models import ShiftStatus, ShiftType
from mining_ledger.infrastructure.database.models import Membership, Shift
from mining_ledger.infrastructure.database.repositories import ShiftRepository
from mining_ledger.infrastructure.database.session import get_db
from mining_ledger.utils.date_utils import utc_now

router = APIRouter()


def _get_shift_or_404(repo: ShiftRepository, org_uuid: uuid.UUID, shift_id: str) -> Shift:
    shift = repo.get_shift(org_uuid, parse_id(shift_id, "shift ID"))
    if not shift:
        raise ResourceNotFoundError("Shift not found")
    return shift


@router.post("/orgs/{org_id}/shifts", response_model=ShiftResponse, status_code=201)
def start_shift(
    body: ShiftCreate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    user_id: str = Depends(get_current_user_id),
    membership: Membership = Depends(require_roles(*SHIFT_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Start a shift, optionally with its timesheets and material movements.

    Two steps, two commits:
    1. The shift itself is committed
    2. Timesheets and material movements are added and committed together

    If step 2 fails its entries are rolled back but the shift stays, and the
    caller gets a 500 naming the orphaned shift.
    """
    request_id = get_request_id(request)
    repo = ShiftRepository(db)
    now = utc_now()

    with unit_of_work(db, request_id):
        shift = repo.create_shift(
            org_uuid,
            date=body.shift_date or now.date(),
            type=ShiftType(body.type).value,
            supervisor_id=body.supervisor_id or user_id,
            created_by_id=user_id,
            status=ShiftStatus.OPEN.value,
            start_time=now,
            notes=body.notes,
        )
    shift_id = str(shift.id)

    if body.timesheets or body.materials:
        try:
            repo.add_timesheets(shift, [entry.model_dump() for entry in body.timesheets])
            repo.add_materials(shift, [entry.model_dump() for entry in body.materials])
            db.commit()
        except Exception as e:
            db.rollback()
            logging.error(
                f"Shift entries failed, shift left without entries: {e}",
                extra={"request_id": request_id, "shift_id": shift_id},
            )
            raise PartialWriteError("Shift created but its entries could not be saved", orphan_id=shift_id) from e

    db.refresh(shift)
    return shift


@router.get("/orgs/{org_id}/shifts", response_model=List[ShiftResponse])
def list_shifts(
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """50 most recent shifts"""
    return ShiftRepository(db).get_recent(org_uuid)


@router.patch("/orgs/{org_id}/shifts/{shift_id}", response_model=ShiftResponse)
def update_shift(
    shift_id: str,
    body: ShiftUpdate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    user_id: str = Depends(get_current_user_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """Submit, approve or annotate a shift (its creator or admin/owner)"""
    repo = ShiftRepository(db)
    with unit_of_work(db, get_request_id(request)):
        shift = _get_shift_or_404(repo, org_uuid, shift_id)
        require_owner_or_manager(membership, user_id, shift.created_by_id)
        repo.update(shift, body.model_dump(exclude_none=True))
    return shift


@router.post("/orgs/{org_id}/shifts/{shift_id}/timesheets", response_model=TimesheetResponse, status_code=201)
def add_timesheet(
    shift_id: str,
    body: TimesheetCreate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    repo = ShiftRepository(db)
    with unit_of_work(db, get_request_id(request)):
        shift = _get_shift_or_404(repo, org_uuid, shift_id)
        (timesheet,) = repo.add_timesheets(shift, [body.model_dump()])
    return timesheet


@router.post("/orgs/{org_id}/shifts/{shift_id}/materials", response_model=MaterialResponse, status_code=201)
def add_material_movement(
    shift_id: str,
    body: MaterialCreate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    repo = ShiftRepository(db)
    with unit_of_work(db, get_request_id(request)):
        shift = _get_shift_or_404(repo, org_uuid, shift_id)
        (movement,) = repo.add_materials(shift, [body.model_dump()])
    return movement
