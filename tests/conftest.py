"""Shared test fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from kitchzero.api.middleware.auth import create_access_token
from kitchzero.db.base import Base
# Import all models to register with Base.metadata
import kitchzero.db.models  # noqa: F401
from kitchzero.db.models import (
    BranchRow,
    InventoryItemRow,
    RecipeIngredientRow,
    RecipeRow,
    TenantRow,
    UserRow,
)

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for services that stamp requested_at/responded_at."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded(session_factory):
    """Two tenants with branches, users, stock and one recipe."""
    async with session_factory() as session:
        session.add_all([
            TenantRow(tenant_id="tn_pasta", name="Pasta House", slug="pasta-house", settings={}),
            TenantRow(
                tenant_id="tn_grill", name="Grill Co", slug="grill-co",
                settings={"waste_approval_threshold": 500},
            ),
            TenantRow(tenant_id="tn_closed", name="Closed", slug="closed", is_active=False),
        ])
        await session.flush()
        session.add_all([
            BranchRow(branch_id="br_downtown", tenant_id="tn_pasta", name="Downtown"),
            BranchRow(branch_id="br_harbor", tenant_id="tn_pasta", name="Harbor"),
            BranchRow(branch_id="br_grill", tenant_id="tn_grill", name="Grill Main"),
        ])
        await session.flush()
        session.add_all([
            UserRow(user_id="usr_owner", username="owner", role="RESTAURANT_ADMIN", tenant_id="tn_pasta"),
            UserRow(user_id="usr_owner2", username="owner2", role="RESTAURANT_ADMIN", tenant_id="tn_pasta"),
            UserRow(
                user_id="usr_retired", username="retired", role="RESTAURANT_ADMIN",
                tenant_id="tn_pasta", is_active=False,
            ),
            UserRow(
                user_id="usr_chef", username="chef", role="BRANCH_ADMIN",
                tenant_id="tn_pasta", branch_id="br_downtown",
            ),
            UserRow(
                user_id="usr_harbor", username="harbor", role="BRANCH_ADMIN",
                tenant_id="tn_pasta", branch_id="br_harbor",
            ),
            UserRow(user_id="usr_kz", username="kzadmin", role="KITCHZERO_ADMIN"),
            UserRow(user_id="usr_grill_owner", username="grillowner", role="RESTAURANT_ADMIN", tenant_id="tn_grill"),
            UserRow(
                user_id="usr_grill_chef", username="grillchef", role="BRANCH_ADMIN",
                tenant_id="tn_grill", branch_id="br_grill",
            ),
        ])
        session.add_all([
            InventoryItemRow(
                item_id="itm_tomato", tenant_id="tn_pasta", branch_id="br_downtown",
                name="Tomatoes", unit="KG", current_stock=200.0, average_cost=2.0,
            ),
            InventoryItemRow(
                item_id="itm_cheese", tenant_id="tn_pasta", branch_id="br_downtown",
                name="Mozzarella", unit="KG", current_stock=40.0, average_cost=12.0,
            ),
            InventoryItemRow(
                item_id="itm_steak", tenant_id="tn_grill", branch_id="br_grill",
                name="Ribeye", unit="KG", current_stock=30.0, average_cost=40.0,
            ),
        ])
        await session.flush()
        session.add(RecipeRow(recipe_id="rcp_pizza", tenant_id="tn_pasta", name="Margherita", yield_quantity=4.0))
        await session.flush()
        session.add_all([
            RecipeIngredientRow(
                ingredient_id="ing_1", recipe_id="rcp_pizza", inventory_item_id="itm_tomato", quantity=2.0,
            ),
            RecipeIngredientRow(
                ingredient_id="ing_2", recipe_id="rcp_pizza", inventory_item_id="itm_cheese", quantity=1.0,
            ),
        ])
        await session.commit()


@pytest.fixture
def clock():
    return FakeClock()


def auth_headers(user_id: str, role: str, tenant_id: str | None, branch_id: str | None = None) -> dict:
    token = create_access_token(user_id, role, tenant_id, branch_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers():
    return auth_headers("usr_owner", "RESTAURANT_ADMIN", "tn_pasta")


@pytest.fixture
def owner2_headers():
    return auth_headers("usr_owner2", "RESTAURANT_ADMIN", "tn_pasta")


@pytest.fixture
def chef_headers():
    return auth_headers("usr_chef", "BRANCH_ADMIN", "tn_pasta", "br_downtown")


@pytest.fixture
def app(db_engine, session_factory):
    """Create a test application instance with in-memory DB."""
    from kitchzero.main import create_app

    _app = create_app()
    _app.state.db_engine = db_engine
    _app.state.db_session_factory = session_factory
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
