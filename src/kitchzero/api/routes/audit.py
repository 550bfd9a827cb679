"""Audit trail query routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.base import as_utc
from kitchzero.dependencies import RestaurantAdmin, get_db
from kitchzero.repositories.audit_repo import AuditLogRepository

router = APIRouter(tags=["Audit"])


@router.get("/audit/events/resource/{resource_id}")
async def list_resource_events(
    resource_id: str,
    user: RestaurantAdmin,
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    rows = await AuditLogRepository(db).list_by_resource(resource_id, tenant_id=user["tenant_id"])
    return [
        {
            "audit_id": r.audit_id,
            "event_type": r.event_type,
            "event": r.event,
            "action": r.action,
            "resource_type": r.resource_type,
            "resource_id": r.resource_id,
            "user_id": r.user_id,
            "tenant_id": r.tenant_id,
            "branch_id": r.branch_id,
            "old_values": r.old_values,
            "new_values": r.new_values,
            "timestamp": as_utc(r.timestamp).isoformat() if r.timestamp else None,
        }
        for r in rows
    ]
