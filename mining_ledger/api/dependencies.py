"""Dependency injection for FastAPI endpoints"""

import logging
import uuid
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from mining_ledger.domain.exceptions import (
    AuthenticationRequired,
    DomainException,
    InvalidIdentifierError,
    OrganizationIdMissing,
)
from mining_ledger.domain.membership import require_role
from mining_ledger.domain.models import OrgRole
from mining_ledger.infrastructure.database.models import Membership
from mining_ledger.infrastructure.database.session import get_db
from mining_ledger.services.authorization import authorize


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-ID")) -> str:
    """Authenticated user, as asserted by the upstream identity layer"""
    if not x_user_id:
        raise AuthenticationRequired("Authentication required")
    return x_user_id


def parse_id(value: Optional[str], label: str = "ID") -> uuid.UUID:
    """Parse a path identifier, raising a client error when malformed"""
    try:
        return uuid.UUID(value)
    except (TypeError, ValueError):
        raise InvalidIdentifierError(f"Invalid {label} format")


def get_org_id(org_id: str) -> uuid.UUID:
    if not org_id or not org_id.strip():
        raise OrganizationIdMissing("Organization ID required")
    return parse_id(org_id, "organization ID")


def get_membership(
    request: Request,
    org_uuid: uuid.UUID = Depends(get_org_id),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Membership:
    """Membership gate: active member of the path organization, attached to request state"""
    membership = authorize(db, user_id, org_uuid)
    request.state.membership = membership
    return membership


def require_roles(*roles: OrgRole) -> Callable[..., Membership]:
    """
    Dependency to require one of the given roles (owners always pass).

    Usage:
        @router.patch("/orgs/{org_id}")
        def update_org(membership: Membership = Depends(require_roles(OrgRole.ADMIN))):
            ...
    """

    def role_checker(membership: Membership = Depends(get_membership)) -> Membership:
        require_role(membership, roles)
        return membership

    return role_checker


@contextmanager
def unit_of_work(db: Session, request_id: str) -> Iterator[Session]:
    """
    Commit on success; roll back and re-raise domain errors; turn anything
    else into a generic 500.
    """
    try:
        yield db
        db.commit()
    except (DomainException, HTTPException):
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error") from e
