"""Inventory item, recipe and adjustment repositories."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.models.inventory import (
    InventoryAdjustmentRow,
    InventoryItemRow,
    RecipeIngredientRow,
    RecipeRow,
)
from kitchzero.repositories.base import BaseRepository


class InventoryItemRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, InventoryItemRow)

    async def get(self, item_id: str) -> InventoryItemRow | None:
        return await self.get_by_id("item_id", item_id)

    async def get_many_by_id(self, item_ids) -> dict[str, InventoryItemRow]:
        return await self.get_many("item_id", item_ids)


class RecipeRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, RecipeRow)

    async def get(self, recipe_id: str) -> RecipeRow | None:
        return await self.get_by_id("recipe_id", recipe_id)

    async def get_many_by_id(self, recipe_ids) -> dict[str, RecipeRow]:
        return await self.get_many("recipe_id", recipe_ids)

    async def list_ingredients(self, recipe_id: str) -> list[RecipeIngredientRow]:
        stmt = (
            select(RecipeIngredientRow)
            .where(RecipeIngredientRow.recipe_id == recipe_id)
            .order_by(RecipeIngredientRow.ingredient_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class InventoryAdjustmentRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, InventoryAdjustmentRow)
