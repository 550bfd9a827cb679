"""Seed a demo tenant into the local SQLite database and print access tokens.

Creates (idempotent):
  1. Tenant tn_demo with branch br_demo_main
  2. A restaurant admin (approver) and a branch admin
  3. Two inventory items and a recipe using both

Usage:
    KZ_LOCAL_MODE=1 python scripts/seed_local.py
    kitchzero-server --local
"""

import asyncio

from kitchzero.api.middleware.auth import create_access_token
from kitchzero.config import settings
from kitchzero.db.base import Base
from kitchzero.db.engine import create_db_engine, create_session_factory
from kitchzero.db.models import (
    BranchRow,
    InventoryItemRow,
    RecipeIngredientRow,
    RecipeRow,
    TenantRow,
    UserRow,
)

TENANT = "tn_demo"
BRANCH = "br_demo_main"


async def seed() -> None:
    engine = create_db_engine(settings.effective_database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with create_session_factory(engine)() as session:
        if await session.get(TenantRow, TENANT) is not None:
            print(f"Tenant {TENANT} already seeded, skipping.")
        else:
            session.add(TenantRow(tenant_id=TENANT, name="Demo Bistro", slug="demo-bistro", settings={}))
            await session.flush()
            session.add(BranchRow(branch_id=BRANCH, tenant_id=TENANT, name="Main Street"))
            await session.flush()
            session.add_all([
                UserRow(user_id="usr_demo_owner", username="demo_owner", role="RESTAURANT_ADMIN", tenant_id=TENANT),
                UserRow(
                    user_id="usr_demo_chef", username="demo_chef", role="BRANCH_ADMIN",
                    tenant_id=TENANT, branch_id=BRANCH,
                ),
                InventoryItemRow(
                    item_id="itm_demo_flour", tenant_id=TENANT, branch_id=BRANCH,
                    name="Flour", unit="KG", current_stock=80.0, average_cost=1.2,
                ),
                InventoryItemRow(
                    item_id="itm_demo_salmon", tenant_id=TENANT, branch_id=BRANCH,
                    name="Salmon", unit="KG", current_stock=12.0, average_cost=28.0,
                ),
                RecipeRow(recipe_id="rcp_demo_pie", tenant_id=TENANT, name="Salmon Pie", yield_quantity=6.0),
            ])
            await session.flush()
            session.add_all([
                RecipeIngredientRow(
                    ingredient_id="ing_demo_1", recipe_id="rcp_demo_pie",
                    inventory_item_id="itm_demo_flour", quantity=1.5,
                ),
                RecipeIngredientRow(
                    ingredient_id="ing_demo_2", recipe_id="rcp_demo_pie",
                    inventory_item_id="itm_demo_salmon", quantity=2.0,
                ),
            ])
            await session.commit()
            print(f"Seeded tenant {TENANT}.")

    await engine.dispose()

    print()
    print("Restaurant admin token:")
    print("  " + create_access_token("usr_demo_owner", "RESTAURANT_ADMIN", TENANT))
    print("Branch admin token:")
    print("  " + create_access_token("usr_demo_chef", "BRANCH_ADMIN", TENANT, BRANCH))


if __name__ == "__main__":
    asyncio.run(seed())
