"""Audit log repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.models.audit import AuditLogRow
from kitchzero.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, AuditLogRow)

    async def append(self, **kwargs) -> AuditLogRow:
        return await self.create(**kwargs)

    async def list_by_resource(self, resource_id: str, tenant_id: str | None = None) -> list[AuditLogRow]:
        stmt = select(AuditLogRow).where(AuditLogRow.resource_id == resource_id)
        if tenant_id:
            stmt = stmt.where(AuditLogRow.tenant_id == tenant_id)
        result = await self.session.execute(stmt.order_by(AuditLogRow.timestamp))
        return list(result.scalars().all())
