"""Approval notifications: in-app records plus outbound webhooks.

Notification delivery is best effort. A failure here is logged and dropped so
it never fails the approval request that triggered it, and webhook delivery
runs in the background so a slow subscriber never delays the caller.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.models.approval import ApprovalRequestRow
from kitchzero.events.webhook_emitter import dispatch_event
from kitchzero.repositories.notification_repo import NotificationRepository
from kitchzero.services.id_generator import generate_id

logger = logging.getLogger(__name__)

APPROVAL_CREATED = "approval.created"

PRIORITY_SEVERITY = {
    "LOW": "info",
    "MEDIUM": "info",
    "HIGH": "warning",
    "CRITICAL": "critical",
}


class ApprovalNotifier:
    """Fires one notification event per created approval request."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def notify(self, approval: ApprovalRequestRow) -> dict:
        """Notify the approvers of a new request.

        Returns the event summary; notification_id is None when the in-app
        record could not be written.
        """
        # Read everything up front: a rollback below expires the row.
        approval_id = approval.approval_request_id
        title = approval.title
        event_id = generate_id("nevt_")
        payload = {
            "event_id": event_id,
            "approval_request_id": approval_id,
            "tenant_id": approval.tenant_id,
            "type": approval.type,
            "priority": approval.priority,
            "approver_ids": list(approval.approver_ids or []),
        }
        result = {"event_id": event_id, "notification_id": None, "webhook_subscribers": 0}

        try:
            notification_id = generate_id("notif_")
            await NotificationRepository(self.session).create(
                notification_id=notification_id,
                tenant_id=payload["tenant_id"],
                recipients=payload["approver_ids"],
                event_type=APPROVAL_CREATED,
                title=f"New approval request: {title}",
                body=f"{payload['type']} request awaiting decision ({payload['priority']} priority)",
                severity=PRIORITY_SEVERITY.get(payload["priority"], "info"),
                read=False,
                link=f"/approvals/{approval_id}",
                extra_data=payload,
            )
            await self.session.commit()
            result["notification_id"] = notification_id
        except Exception as exc:
            await self.session.rollback()
            logger.warning("Failed to record notification for %s: %s", approval_id, exc)

        # Webhooks go out in the background; only the in-app record is written inline.
        try:
            result["webhook_subscribers"] = dispatch_event(APPROVAL_CREATED, payload)
        except Exception as exc:
            logger.warning("Failed to schedule webhook for %s: %s", approval_id, exc)

        logger.info("Notification sent for approval request %s", approval_id)
        return result
