"""Tenant and branch repositories."""

from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.models.tenant import BranchRow, TenantRow
from kitchzero.repositories.base import BaseRepository


class TenantRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, TenantRow)

    async def get(self, tenant_id: str) -> TenantRow | None:
        return await self.get_by_id("tenant_id", tenant_id)

    async def get_active(self, tenant_id: str) -> TenantRow | None:
        tenant = await self.get(tenant_id)
        if tenant is None or not tenant.is_active:
            return None
        return tenant


class BranchRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, BranchRow)

    async def get_many_by_id(self, branch_ids) -> dict[str, BranchRow]:
        return await self.get_many("branch_id", branch_ids)
