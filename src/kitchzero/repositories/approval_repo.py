"""Approval request repository."""

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.models.approval import ApprovalRequestRow
from kitchzero.db.models.inventory import InventoryAdjustmentRow, InventoryItemRow, RecipeRow
from kitchzero.db.models.tenant import BranchRow
from kitchzero.db.models.user import UserRow
from kitchzero.db.models.waste import WasteEntryRow
from kitchzero.models.enums import ApprovalStatus, Priority
from kitchzero.repositories.base import BaseRepository
from kitchzero.repositories.inventory_repo import InventoryItemRepository, RecipeRepository
from kitchzero.repositories.tenant_repo import BranchRepository
from kitchzero.repositories.user_repo import UserRepository

PRIORITY_RANK = {
    Priority.LOW.value: 0,
    Priority.MEDIUM.value: 1,
    Priority.HIGH.value: 2,
    Priority.CRITICAL.value: 3,
}

_priority_order = case(PRIORITY_RANK, value=ApprovalRequestRow.priority, else_=0)


@dataclass
class ApprovalRelations:
    """Rows joined to a set of approval requests."""

    requesters: dict[str, UserRow] = field(default_factory=dict)
    branches: dict[str, BranchRow] = field(default_factory=dict)
    adjustments: dict[str, list[InventoryAdjustmentRow]] = field(default_factory=dict)
    waste_entries: dict[str, list[WasteEntryRow]] = field(default_factory=dict)
    items: dict[str, InventoryItemRow] = field(default_factory=dict)
    recipes: dict[str, RecipeRow] = field(default_factory=dict)


class ApprovalRequestRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ApprovalRequestRow)

    async def get(self, approval_request_id: str) -> ApprovalRequestRow | None:
        return await self.get_by_id("approval_request_id", approval_request_id)

    async def get_for_update(self, approval_request_id: str) -> ApprovalRequestRow | None:
        """Re-read a request from the store, locking the row where supported."""
        stmt = (
            select(ApprovalRequestRow)
            .where(ApprovalRequestRow.approval_request_id == approval_request_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_relations(
        self, approval_request_id: str
    ) -> tuple[ApprovalRequestRow | None, ApprovalRelations]:
        row = await self.get(approval_request_id)
        if row is None:
            return None, ApprovalRelations()
        return row, await self.fetch_relations([row])

    async def list_pending_for_approver(self, tenant_id: str, user_id: str) -> list[ApprovalRequestRow]:
        """PENDING requests naming the user as approver, highest priority and oldest first."""
        stmt = (
            select(ApprovalRequestRow)
            .where(
                ApprovalRequestRow.tenant_id == tenant_id,
                ApprovalRequestRow.status == ApprovalStatus.PENDING.value,
            )
            .order_by(_priority_order.desc(), ApprovalRequestRow.requested_at.asc())
        )
        result = await self.session.execute(stmt)
        # approver_ids is a JSON list; membership is checked here to stay dialect neutral
        return [row for row in result.scalars().all() if user_id in (row.approver_ids or [])]

    def _filtered(
        self,
        stmt,
        tenant_id: str,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        type: str | None = None,
        status: str | None = None,
    ):
        stmt = stmt.where(ApprovalRequestRow.tenant_id == tenant_id)
        if start_date is not None:
            stmt = stmt.where(ApprovalRequestRow.requested_at >= start_date)
        if end_date is not None:
            stmt = stmt.where(ApprovalRequestRow.requested_at <= end_date)
        if type:
            stmt = stmt.where(ApprovalRequestRow.type == type)
        if status:
            stmt = stmt.where(ApprovalRequestRow.status == status)
        return stmt

    async def list_filtered(self, tenant_id: str, **filters) -> list[ApprovalRequestRow]:
        stmt = self._filtered(select(ApprovalRequestRow), tenant_id, **filters)
        result = await self.session.execute(stmt.order_by(ApprovalRequestRow.requested_at.asc()))
        return list(result.scalars().all())

    async def count(self, tenant_id: str, **filters) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(ApprovalRequestRow), tenant_id, **filters
        )
        return (await self.session.execute(stmt)).scalar() or 0

    async def list_page(
        self, tenant_id: str, offset: int, limit: int, **filters
    ) -> list[ApprovalRequestRow]:
        stmt = (
            self._filtered(select(ApprovalRequestRow), tenant_id, **filters)
            .order_by(ApprovalRequestRow.requested_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def transition_status(
        self,
        approval_request_id: str,
        status: str,
        responded_at: datetime,
        approved_by: str | None = None,
        rejected_by: str | None = None,
        approval_reason: str | None = None,
        rejection_reason: str | None = None,
    ) -> bool:
        """Move a PENDING request to a terminal status.

        Returns False when the row is no longer PENDING, leaving it untouched.
        """
        stmt = (
            update(ApprovalRequestRow)
            .where(
                ApprovalRequestRow.approval_request_id == approval_request_id,
                ApprovalRequestRow.status == ApprovalStatus.PENDING.value,
            )
            .values(
                status=status,
                responded_at=responded_at,
                approved_by=approved_by,
                rejected_by=rejected_by,
                approval_reason=approval_reason,
                rejection_reason=rejection_reason,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def cascade_status(self, approval_request_id: str, status: str) -> tuple[int, int]:
        """Set the status of every adjustment and waste entry linked to a request."""
        adjustments = await self.session.execute(
            update(InventoryAdjustmentRow)
            .where(InventoryAdjustmentRow.approval_id == approval_request_id)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        waste = await self.session.execute(
            update(WasteEntryRow)
            .where(WasteEntryRow.approval_id == approval_request_id)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return adjustments.rowcount, waste.rowcount

    async def fetch_relations(
        self, rows: list[ApprovalRequestRow], include_children: bool = True
    ) -> ApprovalRelations:
        """Bulk-fetch requesters, branches and linked child rows (avoids N+1)."""
        relations = ApprovalRelations()
        if not rows:
            return relations

        relations.requesters = await UserRepository(self.session).get_many_by_id(
            r.requested_by for r in rows
        )
        relations.branches = await BranchRepository(self.session).get_many_by_id(
            u.branch_id for u in relations.requesters.values()
        )
        if not include_children:
            return relations

        ids = [r.approval_request_id for r in rows]
        adj_result = await self.session.execute(
            select(InventoryAdjustmentRow)
            .where(InventoryAdjustmentRow.approval_id.in_(ids))
            .order_by(InventoryAdjustmentRow.created_at)
        )
        for adj in adj_result.scalars().all():
            relations.adjustments.setdefault(adj.approval_id, []).append(adj)

        waste_result = await self.session.execute(
            select(WasteEntryRow)
            .where(WasteEntryRow.approval_id.in_(ids))
            .order_by(WasteEntryRow.created_at)
        )
        for entry in waste_result.scalars().all():
            relations.waste_entries.setdefault(entry.approval_id, []).append(entry)

        item_ids = {a.inventory_item_id for group in relations.adjustments.values() for a in group}
        item_ids |= {w.inventory_item_id for group in relations.waste_entries.values() for w in group}
        relations.items = await InventoryItemRepository(self.session).get_many_by_id(item_ids)
        relations.recipes = await RecipeRepository(self.session).get_many_by_id(
            w.recipe_id for group in relations.waste_entries.values() for w in group
        )
        return relations
