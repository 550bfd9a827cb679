"""Approval workflow engine.

Creates approval requests, resolves who may decide them, applies decisions
as a single guarded transition, and builds the read models used by the
approval dashboard.

State machine::

    PENDING --approve--> APPROVED
    PENDING --reject---> REJECTED

APPROVED and REJECTED are terminal. A decision moves the request and every
inventory adjustment and waste entry linked to it in one transaction.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.base import as_utc, utcnow
from kitchzero.db.engine import unit_of_work
from kitchzero.db.models.approval import ApprovalRequestRow
from kitchzero.db.models.inventory import InventoryAdjustmentRow
from kitchzero.db.models.waste import WasteEntryRow
from kitchzero.errors.exceptions import (
    AuditLogError,
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from kitchzero.events.notifications import ApprovalNotifier
from kitchzero.models.approval import (
    ApprovalAnalytics,
    ApprovalAnalyticsFilters,
    ApprovalDecision,
    ApprovalDetailView,
    ApprovalHistoryEntry,
    ApprovalHistoryPage,
    ApprovalRequestCreate,
    ApprovalRequestView,
    BranchSummary,
    RequesterSummary,
    decode_request_data,
    encode_request_data,
)
from kitchzero.models.common import Pagination
from kitchzero.models.enums import ApprovalStatus, AuditAction, Priority
from kitchzero.models.inventory import InventoryAdjustmentView, InventoryItemSummary
from kitchzero.models.waste import RecipeSummary, WasteEntryView
from kitchzero.repositories.approval_repo import ApprovalRelations, ApprovalRequestRepository
from kitchzero.repositories.tenant_repo import TenantRepository
from kitchzero.repositories.user_repo import UserRepository
from kitchzero.services.approval.analytics import (
    ApprovalSnapshot,
    build_report,
    calculate_urgency_level,
    days_waiting,
    is_overdue,
)
from kitchzero.services.approval.policy import APPROVER_ROLES, can_approve
from kitchzero.services.audit_log import AuditLogService
from kitchzero.services.id_generator import generate_id

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "APPROVAL_REQUEST"
MAX_PAGE_SIZE = 100


def _validation_details(exc: PydanticValidationError) -> list[dict]:
    return exc.errors(include_url=False, include_context=False, include_input=False)


class ApprovalService:
    """Approval workflow bound to one database session."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: ApprovalNotifier | None = None,
        audit: AuditLogService | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.repo = ApprovalRequestRepository(session)
        self.users = UserRepository(session)
        self.tenants = TenantRepository(session)
        self.notifier = notifier or ApprovalNotifier(session)
        self.audit = audit or AuditLogService(session)
        self.clock = clock

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @staticmethod
    def parse_request(request: ApprovalRequestCreate | Mapping[str, Any]) -> ApprovalRequestCreate:
        if isinstance(request, ApprovalRequestCreate):
            return request
        try:
            return ApprovalRequestCreate.model_validate(request)
        except PydanticValidationError as exc:
            raise ValidationError("Invalid approval request", details=_validation_details(exc)) from exc

    async def resolve_approvers(self, tenant_id: str) -> list[str]:
        """Active users of the tenant who may decide approval requests."""
        users = await self.users.list_active_by_roles(tenant_id, APPROVER_ROLES)
        return [u.user_id for u in users if can_approve(u.role)]

    async def stage_approval_request(
        self,
        request: ApprovalRequestCreate | Mapping[str, Any],
        requested_by: str,
        tenant_id: str,
    ) -> ApprovalRequestRow:
        """Insert a PENDING request inside the caller's transaction.

        Callers that create child rows pointing at the request do so in the
        same transaction, then call announce_created once it commits.
        """
        request = self.parse_request(request)

        if await self.tenants.get_active(tenant_id) is None:
            raise NotFoundError("Tenant", tenant_id)

        approver_ids = await self.resolve_approvers(tenant_id)
        if not approver_ids:
            raise ValidationError(
                f"No active approvers for tenant '{tenant_id}'",
                details={"tenant_id": tenant_id, "type": str(request.type)},
            )

        return await self.repo.create(
            approval_request_id=generate_id("appr_"),
            tenant_id=tenant_id,
            type=str(request.type),
            title=request.title,
            description=request.description,
            request_data=encode_request_data(request.request_data),
            requested_by=requested_by,
            approver_ids=approver_ids,
            priority=str(request.priority or Priority.MEDIUM),
            status=ApprovalStatus.PENDING.value,
            requested_at=self.clock(),
            due_date=as_utc(request.due_date),
        )

    async def announce_created(
        self,
        approval: ApprovalRequestRow,
        request: ApprovalRequestCreate,
    ) -> None:
        """Notify approvers and record the creation once the request has committed."""
        approval_id = approval.approval_request_id
        requested_by = approval.requested_by
        tenant_id = approval.tenant_id

        await self.notifier.notify(approval)

        try:
            await self.audit.log_business_activity(
                event="APPROVAL_REQUEST_CREATED",
                action=AuditAction.CREATE,
                resource_type=RESOURCE_TYPE,
                resource_id=approval_id,
                user_id=requested_by,
                tenant_id=tenant_id,
                new_values=request.model_dump(mode="json"),
            )
        except AuditLogError as exc:
            exc.details = {"approval_request_id": approval_id, "status": ApprovalStatus.PENDING.value}
            raise

    async def create_approval_request(
        self,
        request: ApprovalRequestCreate | Mapping[str, Any],
        requested_by: str,
        tenant_id: str,
    ) -> ApprovalRequestView:
        request = self.parse_request(request)
        async with unit_of_work(self.session):
            approval = await self.stage_approval_request(request, requested_by, tenant_id)

        relations = await self.repo.fetch_relations([approval], include_children=False)
        view = self._to_view(approval, relations)
        logger.info(
            "Approval request %s created (type=%s, priority=%s, approvers=%d)",
            view.approval_request_id, view.type, view.priority, len(view.approver_ids),
        )
        await self.announce_created(approval, request)
        return view

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    async def _authorize_decider(
        self, approval: ApprovalRequestRow, approver_user_id: str, tenant_id: str
    ) -> None:
        if approver_user_id not in (approval.approver_ids or []):
            raise AuthorizationError("User not authorized to decide this approval request")

        # The approver list is frozen at creation; current rights are re-checked.
        user = await self.users.get(approver_user_id)
        if (
            user is None
            or not user.is_active
            or user.tenant_id != tenant_id
            or not can_approve(user.role)
        ):
            raise AuthorizationError("User no longer holds approval rights for this tenant")

    async def process_approval_decision(
        self,
        approval_id: str,
        decision: ApprovalDecision | Mapping[str, Any],
        approver_user_id: str,
        tenant_id: str,
    ) -> ApprovalRequestView:
        """Apply one decision to a PENDING request and its linked rows.

        Raises NotFoundError, AuthorizationError or InvalidStateError; on any
        of them nothing is written.
        """
        if not isinstance(decision, ApprovalDecision):
            try:
                decision = ApprovalDecision.model_validate(decision)
            except PydanticValidationError as exc:
                raise ValidationError("Invalid approval decision", details=_validation_details(exc)) from exc

        status = decision.status.value
        approved = decision.status == ApprovalStatus.APPROVED

        async with unit_of_work(self.session):
            approval = await self.repo.get_for_update(approval_id)
            if approval is None or approval.tenant_id != tenant_id:
                raise NotFoundError("Approval request", approval_id)

            await self._authorize_decider(approval, approver_user_id, tenant_id)

            if approval.status != ApprovalStatus.PENDING:
                raise InvalidStateError(approval_id, approval.status)

            won = await self.repo.transition_status(
                approval_id,
                status=status,
                responded_at=self.clock(),
                approved_by=approver_user_id if approved else None,
                rejected_by=None if approved else approver_user_id,
                approval_reason=decision.reason if approved else None,
                rejection_reason=None if approved else decision.reason,
            )
            if not won:
                # Another decision committed between our read and our write.
                current = await self.repo.get_for_update(approval_id)
                raise InvalidStateError(approval_id, current.status if current else "unknown")

            adjustments, waste_entries = await self.repo.cascade_status(approval_id, status)
            approval = await self.repo.get_for_update(approval_id)
            view = self._to_view(approval)

        logger.info(
            "Approval request %s %s by %s (%d adjustments, %d waste entries)",
            approval_id, status, approver_user_id, adjustments, waste_entries,
        )

        try:
            await self.audit.log_business_activity(
                event=f"APPROVAL_{status}",
                action=AuditAction.UPDATE,
                resource_type=RESOURCE_TYPE,
                resource_id=approval_id,
                user_id=approver_user_id,
                tenant_id=tenant_id,
                old_values={"status": ApprovalStatus.PENDING.value},
                new_values={"status": status, "reason": decision.reason},
            )
        except AuditLogError as exc:
            exc.details = {"approval_request_id": approval_id, "status": status}
            raise
        return view

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_pending_approvals(
        self, user_id: str, tenant_id: str, user_role: str
    ) -> list[ApprovalDetailView]:
        """Pending requests the user may decide, most urgent first.

        Roles without approval rights get an empty list rather than an error.
        """
        if not can_approve(user_role):
            return []

        rows = await self.repo.list_pending_for_approver(tenant_id, user_id)
        relations = await self.repo.fetch_relations(rows)
        now = self.clock()
        return [self._to_detail(row, relations, now) for row in rows]

    async def get_approval(self, approval_id: str, tenant_id: str) -> ApprovalDetailView:
        row, relations = await self.repo.get_with_relations(approval_id)
        if row is None or row.tenant_id != tenant_id:
            raise NotFoundError("Approval request", approval_id)
        return self._to_detail(row, relations, self.clock())

    async def get_approval_analytics(
        self,
        tenant_id: str,
        filters: ApprovalAnalyticsFilters | Mapping[str, Any] | None = None,
    ) -> ApprovalAnalytics:
        if filters is None:
            filters = ApprovalAnalyticsFilters()
        elif not isinstance(filters, ApprovalAnalyticsFilters):
            try:
                filters = ApprovalAnalyticsFilters.model_validate(filters)
            except PydanticValidationError as exc:
                raise ValidationError("Invalid analytics filters", details=_validation_details(exc)) from exc

        rows = await self.repo.list_filtered(tenant_id, **self._filter_kwargs(filters))
        relations = await self.repo.fetch_relations(rows, include_children=False)
        return build_report(self._snapshot(row, relations) for row in rows)

    async def get_approval_history(
        self,
        tenant_id: str,
        page: int = 1,
        limit: int = 20,
        type: str | None = None,
        status: str | None = None,
    ) -> ApprovalHistoryPage:
        if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"page must be >= 1 and limit between 1 and {MAX_PAGE_SIZE}",
                details={"page": page, "limit": limit},
            )

        filters = {"type": type, "status": status}
        total = await self.repo.count(tenant_id, **filters)
        rows = await self.repo.list_page(tenant_id, offset=(page - 1) * limit, limit=limit, **filters)
        relations = await self.repo.fetch_relations(rows, include_children=False)
        return ApprovalHistoryPage(
            approvals=[
                ApprovalHistoryEntry(
                    **self._to_view(row, relations).model_dump(),
                    parsed_request_data=decode_request_data(row.request_data),
                )
                for row in rows
            ],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                total_pages=-(-total // limit),
            ),
        )

    # ------------------------------------------------------------------
    # Mapping helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _filter_kwargs(filters: ApprovalAnalyticsFilters) -> dict:
        return {
            "start_date": as_utc(filters.start_date),
            "end_date": as_utc(filters.end_date),
            "type": filters.type.value if filters.type else None,
            "status": filters.status.value if filters.status else None,
        }

    @staticmethod
    def _requester(row: ApprovalRequestRow, relations: ApprovalRelations) -> RequesterSummary | None:
        user = relations.requesters.get(row.requested_by)
        if user is None:
            return None
        branch = relations.branches.get(user.branch_id) if user.branch_id else None
        return RequesterSummary(
            id=user.user_id,
            username=user.username,
            role=user.role,
            branch=BranchSummary(id=branch.branch_id, name=branch.name) if branch else None,
        )

    def _to_view(
        self, row: ApprovalRequestRow, relations: ApprovalRelations | None = None
    ) -> ApprovalRequestView:
        return ApprovalRequestView(
            approval_request_id=row.approval_request_id,
            tenant_id=row.tenant_id,
            type=row.type,
            title=row.title,
            description=row.description,
            request_data=row.request_data,
            requested_by=row.requested_by,
            approver_ids=list(row.approver_ids or []),
            priority=row.priority,
            status=row.status,
            requested_at=as_utc(row.requested_at),
            responded_at=as_utc(row.responded_at),
            approved_by=row.approved_by,
            rejected_by=row.rejected_by,
            approval_reason=row.approval_reason,
            rejection_reason=row.rejection_reason,
            due_date=as_utc(row.due_date),
            requester=self._requester(row, relations) if relations else None,
        )

    @staticmethod
    def _adjustment_view(adj: InventoryAdjustmentRow, relations: ApprovalRelations) -> InventoryAdjustmentView:
        item = relations.items.get(adj.inventory_item_id)
        return InventoryAdjustmentView(
            id=adj.adjustment_id,
            inventory_item_id=adj.inventory_item_id,
            adjustment_type=adj.adjustment_type,
            quantity=adj.quantity,
            reason=adj.reason,
            notes=adj.notes,
            status=adj.status,
            approval_id=adj.approval_id,
            created_by=adj.created_by,
            created_at=as_utc(adj.created_at),
            inventory_item=InventoryItemSummary(
                id=item.item_id,
                name=item.name,
                current_stock=item.current_stock,
                unit=item.unit,
            ) if item else None,
        )

    @staticmethod
    def _waste_view(entry: WasteEntryRow, relations: ApprovalRelations) -> WasteEntryView:
        item = relations.items.get(entry.inventory_item_id) if entry.inventory_item_id else None
        recipe = relations.recipes.get(entry.recipe_id) if entry.recipe_id else None
        return WasteEntryView(
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
            created_at=as_utc(entry.created_at),
            inventory_item=InventoryItemSummary(id=item.item_id, name=item.name) if item else None,
            recipe=RecipeSummary(id=recipe.recipe_id, name=recipe.name) if recipe else None,
        )

    def _to_detail(
        self, row: ApprovalRequestRow, relations: ApprovalRelations, now: datetime
    ) -> ApprovalDetailView:
        return ApprovalDetailView(
            **self._to_view(row, relations).model_dump(),
            parsed_request_data=decode_request_data(row.request_data),
            inventory_adjustments=[
                self._adjustment_view(a, relations)
                for a in relations.adjustments.get(row.approval_request_id, [])
            ],
            waste_entries=[
                self._waste_view(w, relations)
                for w in relations.waste_entries.get(row.approval_request_id, [])
            ],
            is_overdue=is_overdue(row.due_date, now),
            days_waiting=days_waiting(row.requested_at, now),
            urgency_level=calculate_urgency_level(row.priority, row.requested_at, now),
        )

    @staticmethod
    def _snapshot(row: ApprovalRequestRow, relations: ApprovalRelations) -> ApprovalSnapshot:
        requester = relations.requesters.get(row.requested_by)
        branch = relations.branches.get(requester.branch_id) if requester and requester.branch_id else None
        return ApprovalSnapshot(
            type=row.type,
            priority=row.priority,
            status=row.status,
            requested_at=row.requested_at,
            responded_at=row.responded_at,
            branch_name=branch.name if branch else None,
        )
