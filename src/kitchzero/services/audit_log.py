"""Append-only business activity log."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.base import utcnow
from kitchzero.errors.exceptions import AuditLogError
from kitchzero.models.enums import AuditAction
from kitchzero.repositories.audit_repo import AuditLogRepository
from kitchzero.services.id_generator import generate_id

logger = logging.getLogger(__name__)

BUSINESS_ACTIVITY = "BUSINESS_ACTIVITY"


class AuditLogService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def log_business_activity(
        self,
        event: str,
        action: AuditAction,
        resource_type: str,
        resource_id: str,
        user_id: str | None,
        tenant_id: str | None,
        branch_id: str | None = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> str:
        """Append one audit record in its own commit and return its id.

        Raises AuditLogError if the record cannot be written; the change being
        audited has already been committed by then.
        """
        audit_id = generate_id("aud_")
        try:
            await AuditLogRepository(self.session).append(
                audit_id=audit_id,
                event_type=BUSINESS_ACTIVITY,
                event=event,
                action=str(action),
                resource_type=resource_type,
                resource_id=resource_id,
                user_id=user_id,
                tenant_id=tenant_id,
                branch_id=branch_id,
                old_values=old_values,
                new_values=new_values,
                timestamp=utcnow(),
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Failed to log business activity %s for %s: %s", event, resource_id, exc)
            raise AuditLogError(event, resource_id) from exc
        logger.info("audit %s %s %s", event, resource_type, resource_id)
        return audit_id
