"""Organizations and their members"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from mining_ledger.api.v1.schemas import (
    MemberAdd,
    MemberUpdate,
    MembershipResponse,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
)
from mining_ledger.api.dependencies import (
    get_current_user_id,
    get_membership,
    get_org_id,
    get_request_id,
    require_roles,
    unit_of_work,
)
from mining_ledger.domain.exceptions import DuplicateMembershipError, ResourceNotFoundError
from mining_ledger.domain.membership import check_membership_change, require_role
from mining_ledger.domain.models import MembershipStatus, OrgRole
from mining_ledger.infrastructure.database.models import Membership
from mining_ledger.infrastructure.database.repositories import MembershipRepository, OrganizationRepository
from mining_ledger.infrastructure.database.session import get_db

router = APIRouter()


@router.post("/orgs", response_model=OrganizationResponse, status_code=201)
def create_organization(
    body: OrganizationCreate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Create an organization; the creator becomes its owner.

    The organization and the owner membership are written in one commit.
    """
    with unit_of_work(db, get_request_id(request)):
        org = OrganizationRepository(db).create_organization(status="active", **body.model_dump())
        MembershipRepository(db).create_membership(user_id=user_id, org_id=org.id, role=OrgRole.OWNER)
    return org


@router.get("/orgs/my-orgs", response_model=List[OrganizationResponse])
def list_my_organizations(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Organizations where the caller holds an active membership"""
    return OrganizationRepository(db).get_for_user(user_id)


@router.get("/orgs/{org_id}", response_model=OrganizationResponse)
def get_organization(
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    org = OrganizationRepository(db).get_by_id(org_uuid)
    if not org:
        raise ResourceNotFoundError("Organization not found")
    return org


@router.patch("/orgs/{org_id}", response_model=OrganizationResponse)
def update_organization(
    body: OrganizationUpdate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(require_roles(OrgRole.ADMIN)),
    db: Session = Depends(get_db),
):
    """Update organization settings (admin/owner)"""
    repo = OrganizationRepository(db)
    with unit_of_work(db, get_request_id(request)):
        org = repo.get_by_id(org_uuid)
        if not org:
            raise ResourceNotFoundError("Organization not found")
        repo.update(org, body.model_dump(exclude_none=True))
    return org


@router.get("/orgs/{org_id}/members", response_model=List[MembershipResponse])
def list_members(
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return MembershipRepository(db).list_active(org_uuid)


@router.post("/orgs/{org_id}/members", response_model=MembershipResponse, status_code=201)
def add_member(
    body: MemberAdd,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    membership: Membership = Depends(require_roles(OrgRole.ADMIN)),
    db: Session = Depends(get_db),
):
    """Add a user to the organization (admin/owner); role defaults to miner"""
    repo = MembershipRepository(db)
    with unit_of_work(db, get_request_id(request)):
        new_role = OrgRole(body.role)
        if new_role == OrgRole.OWNER:
            require_role(membership, ())  # owners only
        existing = repo.get(body.user_id, org_uuid)
        if existing is None:
            return repo.create_membership(user_id=body.user_id, org_id=org_uuid, role=new_role)
        if existing.status == MembershipStatus.ACTIVE.value:
            raise DuplicateMembershipError("User already a member")
        # one record per (user, org): re-adding reactivates it
        repo.update(existing, role=new_role, status=MembershipStatus.ACTIVE)
    return existing


@router.patch("/orgs/{org_id}/members/{member_user_id}", response_model=MembershipResponse)
def update_member(
    member_user_id: str,
    body: MemberUpdate,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    user_id: str = Depends(get_current_user_id),
    membership: Membership = Depends(require_roles(OrgRole.ADMIN)),
    db: Session = Depends(get_db),
):
    """Change a member's role or status (admin/owner)"""
    repo = MembershipRepository(db)
    with unit_of_work(db, get_request_id(request)):
        target = repo.get(member_user_id, org_uuid)
        if target is None:
            raise ResourceNotFoundError("Member not found")
        new_role = OrgRole(body.role) if body.role else None
        new_status = MembershipStatus(body.status) if body.status else None
        check_membership_change(
            membership,
            user_id,
            target,
            new_role=new_role,
            removing=new_status == MembershipStatus.DISABLED,
        )
        repo.update(target, role=new_role, status=new_status)
    return target


@router.delete("/orgs/{org_id}/members/{member_user_id}", response_model=MembershipResponse)
def remove_member(
    member_user_id: str,
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    user_id: str = Depends(get_current_user_id),
    membership: Membership = Depends(require_roles(OrgRole.ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Remove a member (admin/owner).

    The record is kept with status ``disabled``; only owners may remove admins.
    """
    repo = MembershipRepository(db)
    with unit_of_work(db, get_request_id(request)):
        target = repo.get(member_user_id, org_uuid)
        if target is None or target.status == MembershipStatus.DISABLED.value:
            raise ResourceNotFoundError("Member not found")
        check_membership_change(membership, user_id, target, removing=True)
        repo.update(target, status=MembershipStatus.DISABLED)
    return target
