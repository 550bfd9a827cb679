"""Inventory adjustments, direct or gated behind an approval request."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.config import settings
from kitchzero.db.engine import unit_of_work
from kitchzero.db.models.inventory import InventoryAdjustmentRow, InventoryItemRow
from kitchzero.errors.exceptions import AuditLogError, NotFoundError, ValidationError
from kitchzero.models.approval import ApprovalRequestCreate, InventoryAdjustmentRequestData
from kitchzero.models.enums import AdjustmentType, ApprovalStatus, ApprovalType, AuditAction, Priority
from kitchzero.models.inventory import (
    InventoryAdjustmentCreate,
    InventoryAdjustmentView,
    InventoryItemSummary,
)
from kitchzero.repositories.inventory_repo import InventoryAdjustmentRepository, InventoryItemRepository
from kitchzero.services.approval.engine import ApprovalService
from kitchzero.services.approval.policy import requires_approval
from kitchzero.services.audit_log import AuditLogService
from kitchzero.services.id_generator import generate_id

logger = logging.getLogger(__name__)


def signed_quantity(adjustment_type: AdjustmentType, quantity: float) -> float:
    """Stock delta for an adjustment: RECEIVED adds, everything else removes."""
    if adjustment_type == AdjustmentType.RECEIVED:
        return quantity
    return -quantity


def adjustment_priority(quantity: float) -> Priority:
    if abs(quantity) > settings.inventory_high_priority_quantity:
        return Priority.HIGH
    return Priority.MEDIUM


class InventoryService:
    def __init__(self, session: AsyncSession, approvals: ApprovalService | None = None):
        self.session = session
        self.items = InventoryItemRepository(session)
        self.adjustments = InventoryAdjustmentRepository(session)
        self.approvals = approvals or ApprovalService(session)
        self.audit = AuditLogService(session)

    async def _get_item(self, item_id: str, user: dict) -> InventoryItemRow:
        item = await self.items.get(item_id)
        if item is None or item.tenant_id != user["tenant_id"]:
            raise NotFoundError("Inventory item", item_id)
        if user.get("branch_id") and item.branch_id != user["branch_id"]:
            raise NotFoundError("Inventory item", item_id)
        return item

    async def request_inventory_adjustment(
        self, data: InventoryAdjustmentCreate, user: dict
    ) -> InventoryAdjustmentView:
        """Apply an adjustment, or park it behind an approval request.

        Roles that need approval get a PENDING adjustment linked to a new
        INVENTORY_ADJUSTMENT request; stock is untouched until a decision.
        """
        user_id = user["sub"]
        tenant_id = user["tenant_id"]
        gated = requires_approval(user["role"])
        request = None

        async with unit_of_work(self.session):
            item = await self._get_item(data.inventory_item_id, user)
            approval_id = None

            if gated:
                request = ApprovalRequestCreate(
                    type=ApprovalType.INVENTORY_ADJUSTMENT,
                    title=f"Inventory Adjustment: {item.name}",
                    description=f"{data.adjustment_type} - {data.reason}",
                    request_data=InventoryAdjustmentRequestData(**data.model_dump()),
                    priority=adjustment_priority(data.quantity),
                )
                approval = await self.approvals.stage_approval_request(request, user_id, tenant_id)
                approval_id = approval.approval_request_id
                status = ApprovalStatus.PENDING
            else:
                new_stock = item.current_stock + signed_quantity(data.adjustment_type, data.quantity)
                if new_stock < 0:
                    raise ValidationError(
                        "Adjustment would result in negative stock",
                        details={"current_stock": item.current_stock, "requested": data.quantity},
                    )
                await self.items.update(item, current_stock=new_stock)
                status = ApprovalStatus.APPROVED

            adjustment: InventoryAdjustmentRow = await self.adjustments.create(
                adjustment_id=generate_id("adj_"),
                branch_id=item.branch_id,
                inventory_item_id=item.item_id,
                adjustment_type=str(data.adjustment_type),
                quantity=data.quantity,
                reason=data.reason,
                notes=data.notes,
                status=status.value,
                approval_id=approval_id,
                created_by=user_id,
            )
            view = InventoryAdjustmentView(
                id=adjustment.adjustment_id,
                inventory_item_id=adjustment.inventory_item_id,
                adjustment_type=adjustment.adjustment_type,
                quantity=adjustment.quantity,
                reason=adjustment.reason,
                notes=adjustment.notes,
                status=adjustment.status,
                approval_id=adjustment.approval_id,
                created_by=adjustment.created_by,
                created_at=adjustment.created_at,
                inventory_item=InventoryItemSummary(
                    id=item.item_id,
                    name=item.name,
                    current_stock=item.current_stock,
                    unit=item.unit,
                ),
            )

        if gated:
            logger.info("Inventory adjustment %s awaiting approval %s", view.id, view.approval_id)
            await self.approvals.announce_created(approval, request)
            event = "INVENTORY_ADJUSTMENT_REQUESTED"
        else:
            logger.info("Inventory item %s adjusted by %s", view.inventory_item_id, user_id)
            event = "INVENTORY_ADJUSTED"

        try:
            await self.audit.log_business_activity(
                event=event,
                action=AuditAction.CREATE if gated else AuditAction.UPDATE,
                resource_type="INVENTORY_ADJUSTMENT",
                resource_id=view.id,
                user_id=user_id,
                tenant_id=tenant_id,
                branch_id=user.get("branch_id"),
                new_values=view.model_dump(mode="json", exclude={"inventory_item"}),
            )
        except AuditLogError as exc:
            exc.details = {"adjustment_id": view.id, "status": str(view.status)}
            raise
        return view
