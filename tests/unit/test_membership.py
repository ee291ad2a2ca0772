"""Unit tests for membership and role checks"""

import pytest
from types import SimpleNamespace
from mining_ledger.domain.exceptions import (
    InsufficientPermissions,
    InvalidMembershipChangeError,
    NotAMember,
    OrganizationIdMissing,
)
from mining_ledger.domain.membership import (
    MANAGER_ROLES,
    SALES_ROLES,
    SHIFT_ROLES,
    check_membership,
    check_membership_change,
    has_role,
    require_owner_or_manager,
    require_role,
)
from mining_ledger.domain.models import OrgRole

ORG_ID = "0b7d6f2e-5c1a-4a8e-9a53-1f0e2d3c4b5a"


def _member(role="miner", status="active", user_id="user-1"):
    return SimpleNamespace(role=role, status=status, user_id=user_id)


def test_active_member_passes():
    membership = _member()

    assert check_membership(ORG_ID, membership) is membership


def test_missing_org_id_rejected():
    with pytest.raises(OrganizationIdMissing):
        check_membership(None, _member())
    with pytest.raises(OrganizationIdMissing):
        check_membership("", _member())


@pytest.mark.parametrize("membership", [None, _member(status="disabled"), _member(status="invited")])
def test_absent_or_inactive_membership_rejected(membership):
    with pytest.raises(NotAMember):
        check_membership(ORG_ID, membership)


def test_viewer_denied_manager_action():
    with pytest.raises(InsufficientPermissions):
        require_role(_member(role="viewer"), MANAGER_ROLES)


def test_owner_passes_every_role_check():
    owner = _member(role="owner")

    for roles in (SALES_ROLES, SHIFT_ROLES, (OrgRole.ADMIN,), ()):
        assert has_role(owner, roles)


def test_role_groups():
    assert has_role(_member(role="miner"), SALES_ROLES)
    assert not has_role(_member(role="supervisor"), SALES_ROLES)
    assert has_role(_member(role="supervisor"), SHIFT_ROLES)
    assert not has_role(_member(role="viewer"), SHIFT_ROLES)


def test_creator_may_act_without_manager_role():
    require_owner_or_manager(_member(role="viewer", user_id="user-1"), "user-1", "user-1")


def test_non_creator_needs_manager_role():
    with pytest.raises(InsufficientPermissions):
        require_owner_or_manager(_member(role="miner", user_id="user-2"), "user-2", "user-1")

    require_owner_or_manager(_member(role="admin", user_id="user-2"), "user-2", "user-1")


def test_cannot_remove_self():
    owner = _member(role="owner", user_id="user-1")

    with pytest.raises(InvalidMembershipChangeError):
        check_membership_change(owner, "user-1", owner, removing=True)


@pytest.mark.parametrize("new_role", [OrgRole.MINER, OrgRole.ADMIN, None])
def test_cannot_change_own_membership(new_role):
    owner = _member(role="owner", user_id="user-1")

    with pytest.raises(InvalidMembershipChangeError, match="your own role"):
        check_membership_change(owner, "user-1", owner, new_role=new_role)


def test_admin_cannot_change_another_admin():
    admin = _member(role="admin", user_id="admin-1")
    other = _member(role="admin", user_id="admin-2")

    with pytest.raises(InsufficientPermissions, match="Only owners can change admins"):
        check_membership_change(admin, "admin-1", other, removing=True)


def test_admin_cannot_grant_ownership():
    admin = _member(role="admin", user_id="admin-1")
    miner = _member(role="miner", user_id="miner-1")

    with pytest.raises(InsufficientPermissions, match="Only owners can grant ownership"):
        check_membership_change(admin, "admin-1", miner, new_role=OrgRole.OWNER)

    check_membership_change(admin, "admin-1", miner, new_role=OrgRole.SUPERVISOR)


def test_owner_can_change_admins():
    owner = _member(role="owner", user_id="owner-1")
    admin = _member(role="admin", user_id="admin-1")

    check_membership_change(owner, "owner-1", admin, removing=True)
    check_membership_change(owner, "owner-1", admin, new_role=OrgRole.OWNER)
