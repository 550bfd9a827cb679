"""Tests for approval role policy."""

from kitchzero.models.enums import UserRole
from kitchzero.services.approval.policy import can_approve, requires_approval


def test_only_restaurant_admins_approve():
    assert can_approve(UserRole.RESTAURANT_ADMIN)
    assert can_approve("RESTAURANT_ADMIN")
    assert not can_approve(UserRole.BRANCH_ADMIN)
    assert not can_approve(UserRole.KITCHZERO_ADMIN)


def test_unknown_role_has_no_rights():
    assert not can_approve("CASHIER")
    assert not can_approve(None)
    assert not requires_approval("CASHIER")


def test_branch_admin_changes_are_gated():
    assert requires_approval(UserRole.BRANCH_ADMIN)
    assert not requires_approval(UserRole.RESTAURANT_ADMIN)
