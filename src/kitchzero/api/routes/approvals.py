"""Approval workflow API routes."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.dependencies import CurrentUser, RestaurantAdmin, get_db
from kitchzero.models.approval import (
    ApprovalAnalytics,
    ApprovalAnalyticsFilters,
    ApprovalDecision,
    ApprovalDetailView,
    ApprovalHistoryPage,
    ApprovalRequestCreate,
    ApprovalRequestView,
)
from kitchzero.models.enums import ApprovalStatus, ApprovalType
from kitchzero.services.approval.engine import ApprovalService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Approvals"])


@router.post("/approvals/requests", status_code=201, response_model=ApprovalRequestView)
async def create_approval_request(
    request: ApprovalRequestCreate,
    user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    return await ApprovalService(db).create_approval_request(request, user["sub"], user["tenant_id"])


@router.get("/approvals/pending", response_model=list[ApprovalDetailView])
async def list_pending_approvals(
    user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    return await ApprovalService(db).get_pending_approvals(user["sub"], user["tenant_id"], user.get("role"))


@router.get("/approvals/analytics", response_model=ApprovalAnalytics)
async def approval_analytics(
    user: RestaurantAdmin,
    filters: ApprovalAnalyticsFilters = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await ApprovalService(db).get_approval_analytics(user["tenant_id"], filters)


@router.get("/approvals/history", response_model=ApprovalHistoryPage)
async def approval_history(
    user: RestaurantAdmin,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    type: ApprovalType | None = None,
    status: ApprovalStatus | None = None,
    db: AsyncSession = Depends(get_db),
):
    return await ApprovalService(db).get_approval_history(
        user["tenant_id"],
        page=page,
        limit=limit,
        type=type.value if type else None,
        status=status.value if status else None,
    )


@router.get("/approvals/{approval_request_id}", response_model=ApprovalDetailView)
async def get_approval(
    approval_request_id: str,
    user: RestaurantAdmin,
    db: AsyncSession = Depends(get_db),
):
    return await ApprovalService(db).get_approval(approval_request_id, user["tenant_id"])


@router.post("/approvals/{approval_request_id}/decision", response_model=ApprovalRequestView)
async def decide_approval(
    approval_request_id: str,
    decision: ApprovalDecision,
    user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    return await ApprovalService(db).process_approval_decision(
        approval_request_id, decision, user["sub"], user["tenant_id"]
    )
