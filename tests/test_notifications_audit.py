"""Notification sink and audit logger behavior."""

import pytest
from sqlalchemy.exc import OperationalError

from kitchzero.db.models import ApprovalRequestRow, NotificationRow
from kitchzero.errors.exceptions import AuditLogError
from kitchzero.events.notifications import ApprovalNotifier
from kitchzero.models.enums import AuditAction
from kitchzero.repositories.audit_repo import AuditLogRepository
from kitchzero.repositories.notification_repo import NotificationRepository
from kitchzero.services.audit_log import AuditLogService


@pytest.fixture
async def approval(db_session, seeded, clock):
    row = ApprovalRequestRow(
        approval_request_id="appr_fixed",
        tenant_id="tn_pasta",
        type="WASTE_ENTRY",
        title="Spoiled cream",
        request_data="{}",
        requested_by="usr_chef",
        approver_ids=["usr_owner"],
        priority="CRITICAL",
        status="PENDING",
        requested_at=clock(),
    )
    db_session.add(row)
    await db_session.commit()
    return row


@pytest.mark.asyncio
async def test_notification_recorded_for_approvers(db_session, approval):
    result = await ApprovalNotifier(db_session).notify(approval)

    assert result["event_id"].startswith("nevt_")
    assert result["webhook_subscribers"] == 0
    stored = await NotificationRepository(db_session).get(result["notification_id"])
    assert stored.recipients == ["usr_owner"]
    assert stored.severity == "critical"
    assert stored.link == "/approvals/appr_fixed"
    assert stored.extra_data["approval_request_id"] == "appr_fixed"


@pytest.mark.asyncio
async def test_notification_store_failure_swallowed(db_session, approval, monkeypatch):
    async def broken_create(self, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(NotificationRepository, "create", broken_create)
    result = await ApprovalNotifier(db_session).notify(approval)

    assert result["notification_id"] is None
    assert await NotificationRepository(db_session).list_for_tenant("tn_pasta") == []


@pytest.mark.asyncio
async def test_audit_record_written(db_session, seeded):
    audit_id = await AuditLogService(db_session).log_business_activity(
        event="APPROVAL_REJECTED",
        action=AuditAction.UPDATE,
        resource_type="APPROVAL_REQUEST",
        resource_id="appr_1",
        user_id="usr_owner",
        tenant_id="tn_pasta",
        old_values={"status": "PENDING"},
        new_values={"status": "REJECTED"},
    )
    [event] = await AuditLogRepository(db_session).list_by_resource("appr_1")
    assert event.audit_id == audit_id
    assert event.event_type == "BUSINESS_ACTIVITY"
    assert event.action == "UPDATE"
    assert event.new_values == {"status": "REJECTED"}


@pytest.mark.asyncio
async def test_audit_store_failure_raises(db_session, seeded, monkeypatch):
    async def broken_append(self, **kwargs):
        raise OperationalError("INSERT", {}, Exception("locked"))

    monkeypatch.setattr(AuditLogRepository, "append", broken_append)
    with pytest.raises(AuditLogError) as exc_info:
        await AuditLogService(db_session).log_business_activity(
            event="APPROVAL_APPROVED",
            action=AuditAction.UPDATE,
            resource_type="APPROVAL_REQUEST",
            resource_id="appr_2",
            user_id="usr_owner",
            tenant_id="tn_pasta",
        )
    assert exc_info.value.code == "AUDIT_LOG_FAILED"
    assert exc_info.value.status_code == 500
