"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from kitchzero.db.models.tenant import TenantRow, BranchRow
from kitchzero.db.models.user import UserRow
from kitchzero.db.models.inventory import (
    InventoryItemRow,
    RecipeRow,
    RecipeIngredientRow,
    InventoryAdjustmentRow,
)
from kitchzero.db.models.waste import WasteEntryRow
from kitchzero.db.models.approval import ApprovalRequestRow
from kitchzero.db.models.audit import AuditLogRow
from kitchzero.db.models.notification import NotificationRow

__all__ = [
    "TenantRow",
    "BranchRow",
    "UserRow",
    "InventoryItemRow",
    "RecipeRow",
    "RecipeIngredientRow",
    "InventoryAdjustmentRow",
    "WasteEntryRow",
    "ApprovalRequestRow",
    "AuditLogRow",
    "NotificationRow",
]
