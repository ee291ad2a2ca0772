"""Organization membership rules - who may act within a tenant's data"""

from typing import Iterable, Optional

from mining_ledger.domain.exceptions import (
    InsufficientPermissions,
    InvalidMembershipChangeError,
    NotAMember,
    OrganizationIdMissing,
)
from mining_ledger.domain.models import MembershipStatus, OrgRole

MANAGER_ROLES = (OrgRole.OWNER, OrgRole.ADMIN)
SALES_ROLES = (OrgRole.MINER, OrgRole.ADMIN)
SHIFT_ROLES = (OrgRole.MINER, OrgRole.SUPERVISOR, OrgRole.ADMIN)


def check_membership(org_id: Optional[str], membership) -> object:
    """
    Gate for every organization-scoped operation.

    ``membership`` is the stored record for the (user, org) pair or None.
    Returns it unchanged when it exists and is active.

    Raises:
        OrganizationIdMissing: no organization context supplied
        NotAMember: no record, or record not active
    """
    if not org_id:
        raise OrganizationIdMissing("Organization ID required")
    if membership is None or MembershipStatus(membership.status) != MembershipStatus.ACTIVE:
        raise NotAMember("Not a member of this organization")
    return membership


def has_role(membership, allowed_roles: Iterable[OrgRole]) -> bool:
    # Owners pass every role check
    role = OrgRole(membership.role)
    return role == OrgRole.OWNER or role in tuple(allowed_roles)


def require_role(membership, allowed_roles: Iterable[OrgRole]) -> None:
    """Raise InsufficientPermissions unless the membership role is allowed"""
    if not has_role(membership, allowed_roles):
        raise InsufficientPermissions("Insufficient permissions")


def require_owner_or_manager(membership, user_id: str, creator_id: Optional[str]) -> None:
    """The creator of a record may act on it regardless of role, as may admins and owners"""
    if creator_id is not None and creator_id == user_id:
        return
    require_role(membership, MANAGER_ROLES)


def check_membership_change(
    actor,
    actor_user_id: str,
    target,
    new_role: Optional[OrgRole] = None,
    removing: bool = False,
) -> None:
    """
    Validate an admin's change to another member's record.

    - nobody removes or edits their own membership through this path
    - only owners touch admin/owner memberships
    - only owners grant the owner role
    """
    if target.user_id == actor_user_id:
        if removing:
            raise InvalidMembershipChangeError("Cannot remove yourself. Leave the organization instead.")
        raise InvalidMembershipChangeError("Cannot change your own role or status")

    actor_is_owner = OrgRole(actor.role) == OrgRole.OWNER
    if OrgRole(target.role) in MANAGER_ROLES and not actor_is_owner:
        raise InsufficientPermissions("Only owners can change admins")
    if new_role == OrgRole.OWNER and not actor_is_owner:
        raise InsufficientPermissions("Only owners can grant ownership")
