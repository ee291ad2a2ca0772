"""Membership gate consulted by every organization-scoped operation"""

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from mining_ledger.domain.exceptions import OrganizationIdMissing
from mining_ledger.domain.membership import check_membership
from mining_ledger.infrastructure.database.models import Membership
from mining_ledger.infrastructure.database.repositories import MembershipRepository


def authorize(db: Session, user_id: str, org_id: Optional[uuid.UUID]) -> Membership:
    """
    Look up the (user, org) membership and return it if active.

    Pure read. Raises OrganizationIdMissing or NotAMember.
    """
    if org_id is None:
        raise OrganizationIdMissing("Organization ID required")
    membership = MembershipRepository(db).get(user_id, org_id)
    return check_membership(str(org_id), membership)
