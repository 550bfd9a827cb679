"""Waste logging with cost estimation and threshold-gated approval."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.config import settings
from kitchzero.db.engine import unit_of_work
from kitchzero.db.models.inventory import InventoryItemRow, RecipeRow
from kitchzero.errors.exceptions import AuditLogError, NotFoundError, ValidationError
from kitchzero.models.approval import ApprovalRequestCreate, WasteEntryRequestData
from kitchzero.models.enums import ApprovalStatus, ApprovalType, AuditAction, Priority, WasteType
from kitchzero.models.inventory import InventoryItemSummary
from kitchzero.models.waste import RecipeSummary, WasteEntryCreate, WasteEntryView
from kitchzero.repositories.inventory_repo import InventoryItemRepository, RecipeRepository
from kitchzero.repositories.tenant_repo import TenantRepository
from kitchzero.repositories.waste_repo import WasteEntryRepository
from kitchzero.services.approval.engine import ApprovalService
from kitchzero.services.approval.policy import requires_approval
from kitchzero.services.audit_log import AuditLogService
from kitchzero.services.id_generator import generate_id

logger = logging.getLogger(__name__)

THRESHOLD_SETTING = "waste_approval_threshold"


def waste_priority(estimated_cost: float, threshold: float) -> Priority:
    if estimated_cost > threshold * 2:
        return Priority.HIGH
    return Priority.MEDIUM


class WasteService:
    def __init__(self, session: AsyncSession, approvals: ApprovalService | None = None):
        self.session = session
        self.items = InventoryItemRepository(session)
        self.recipes = RecipeRepository(session)
        self.entries = WasteEntryRepository(session)
        self.tenants = TenantRepository(session)
        self.approvals = approvals or ApprovalService(session)
        self.audit = AuditLogService(session)

    async def approval_threshold(self, tenant_id: str) -> float:
        """Cost above which a gated role's waste needs approval; tenants may override."""
        tenant = await self.tenants.get(tenant_id)
        if tenant is not None and tenant.settings and THRESHOLD_SETTING in tenant.settings:
            return float(tenant.settings[THRESHOLD_SETTING])
        return settings.waste_approval_threshold

    async def _deduct(self, item: InventoryItemRow, quantity: float) -> None:
        if item.current_stock < quantity:
            raise ValidationError(
                "Insufficient inventory for waste logging",
                details={
                    "inventory_item_id": item.item_id,
                    "current_stock": item.current_stock,
                    "requested": quantity,
                },
            )
        await self.items.update(item, current_stock=item.current_stock - quantity)

    async def _get_item(self, item_id: str, user: dict) -> InventoryItemRow:
        item = await self.items.get(item_id)
        if item is None or item.tenant_id != user["tenant_id"]:
            raise NotFoundError("Inventory item", item_id)
        if user.get("branch_id") and item.branch_id != user["branch_id"]:
            raise NotFoundError("Inventory item", item_id)
        return item

    async def _consume_raw(self, data: WasteEntryCreate, user: dict) -> tuple[float, InventoryItemRow]:
        item = await self._get_item(data.inventory_item_id, user)
        await self._deduct(item, data.quantity)
        return data.quantity * item.average_cost, item

    async def _consume_product(self, data: WasteEntryCreate, user: dict) -> tuple[float, RecipeRow]:
        recipe = await self.recipes.get(data.recipe_id)
        if recipe is None or recipe.tenant_id != user["tenant_id"]:
            raise NotFoundError("Recipe", data.recipe_id)
        if recipe.yield_quantity <= 0:
            raise ValidationError("Recipe yield must be positive", details={"recipe_id": recipe.recipe_id})

        ratio = data.quantity / recipe.yield_quantity
        cost = 0.0
        for ingredient in await self.recipes.list_ingredients(recipe.recipe_id):
            item = await self._get_item(ingredient.inventory_item_id, user)
            used = ingredient.quantity * ratio
            await self._deduct(item, used)
            cost += used * item.average_cost
        return cost, recipe

    async def log_waste_entry(self, data: WasteEntryCreate, user: dict) -> WasteEntryView:
        """Record waste, deduct stock and open an approval when the cost is over threshold.

        Stock is deducted in the same transaction whether or not approval is
        needed; only the entry status differs.
        """
        user_id = user["sub"]
        tenant_id = user["tenant_id"]
        request = None
        item = recipe = None

        async with unit_of_work(self.session):
            if data.waste_type == WasteType.RAW:
                estimated_cost, item = await self._consume_raw(data, user)
            else:
                estimated_cost, recipe = await self._consume_product(data, user)

            threshold = await self.approval_threshold(tenant_id)
            gated = requires_approval(user["role"]) and estimated_cost > threshold
            approval_id = None

            if gated:
                request = ApprovalRequestCreate(
                    type=ApprovalType.WASTE_ENTRY,
                    title=f"Waste Entry: {data.waste_type} - ${estimated_cost:.2f}",
                    description=f"{data.reason}: {data.quantity:g} {data.unit}",
                    request_data=WasteEntryRequestData(**data.model_dump(), estimated_cost=estimated_cost),
                    priority=waste_priority(estimated_cost, threshold),
                )
                approval = await self.approvals.stage_approval_request(request, user_id, tenant_id)
                approval_id = approval.approval_request_id

            entry = await self.entries.create(
                waste_id=generate_id("waste_"),
                branch_id=user.get("branch_id"),
                waste_type=str(data.waste_type),
                inventory_item_id=data.inventory_item_id,
                recipe_id=data.recipe_id,
                quantity=data.quantity,
                unit=str(data.unit),
                reason=str(data.reason),
                reason_detail=data.reason_detail,
                location=data.location,
                tags=list(data.tags),
                estimated_cost=estimated_cost,
                status=(ApprovalStatus.PENDING if gated else ApprovalStatus.APPROVED).value,
                approval_id=approval_id,
                created_by=user_id,
            )
            view = WasteEntryView(
                id=entry.waste_id,
                waste_type=entry.waste_type,
                quantity=entry.quantity,
                unit=entry.unit,
                reason=entry.reason,
                reason_detail=entry.reason_detail,
                estimated_cost=entry.estimated_cost,
                status=entry.status,
                approval_id=entry.approval_id,
                created_by=entry.created_by,
                created_at=entry.created_at,
                inventory_item=InventoryItemSummary(
                    id=item.item_id, name=item.name, current_stock=item.current_stock, unit=item.unit
                ) if item else None,
                recipe=RecipeSummary(id=recipe.recipe_id, name=recipe.name) if recipe else None,
            )

        logger.info(
            "Waste entry %s logged (cost=%.2f, threshold=%.2f, status=%s)",
            view.id, view.estimated_cost, threshold, view.status,
        )
        if gated:
            await self.approvals.announce_created(approval, request)

        try:
            await self.audit.log_business_activity(
                event="WASTE_ENTRY_LOGGED",
                action=AuditAction.CREATE,
                resource_type="WASTE_ENTRY",
                resource_id=view.id,
                user_id=user_id,
                tenant_id=tenant_id,
                branch_id=user.get("branch_id"),
                new_values=view.model_dump(mode="json", exclude={"inventory_item", "recipe"}),
            )
        except AuditLogError as exc:
            exc.details = {"waste_id": view.id, "status": str(view.status)}
            raise
        return view
