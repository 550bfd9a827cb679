"""User repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.models.user import UserRow
from kitchzero.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, UserRow)

    async def get(self, user_id: str) -> UserRow | None:
        return await self.get_by_id("user_id", user_id)

    async def get_many_by_id(self, user_ids) -> dict[str, UserRow]:
        return await self.get_many("user_id", user_ids)

    async def list_active_by_roles(self, tenant_id: str, roles) -> list[UserRow]:
        """Active users of a tenant holding any of the given roles."""
        stmt = (
            select(UserRow)
            .where(
                UserRow.tenant_id == tenant_id,
                UserRow.role.in_([str(r) for r in roles]),
                UserRow.is_active.is_(True),
            )
            .order_by(UserRow.user_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
