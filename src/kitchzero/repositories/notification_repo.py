"""Notification repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.models.notification import NotificationRow
from kitchzero.repositories.base import BaseRepository


class NotificationRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, NotificationRow)

    async def get(self, notification_id: str) -> NotificationRow | None:
        return await self.get_by_id("notification_id", notification_id)

    async def list_for_tenant(self, tenant_id: str, limit: int = 50) -> list[NotificationRow]:
        stmt = (
            select(NotificationRow)
            .where(NotificationRow.tenant_id == tenant_id)
            .order_by(NotificationRow.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
