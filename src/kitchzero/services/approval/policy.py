"""Who may decide approval requests, and whose changes need one."""

from kitchzero.models.enums import UserRole

APPROVER_ROLES = frozenset({UserRole.RESTAURANT_ADMIN})

# Roles whose inventory and waste changes are gated behind an approval request.
GATED_ROLES = frozenset({UserRole.BRANCH_ADMIN})


def _as_role(role) -> UserRole | None:
    try:
        return UserRole(role)
    except ValueError:
        return None


def can_approve(role) -> bool:
    """True when the role may decide approval requests."""
    return _as_role(role) in APPROVER_ROLES


def requires_approval(role) -> bool:
    """True when changes made by this role must go through an approval request."""
    return _as_role(role) in GATED_ROLES
