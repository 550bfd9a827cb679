"""Waste logging: cost estimation, stock deduction and threshold approval."""

import pytest

from kitchzero.db.models import ApprovalRequestRow, InventoryItemRow
from kitchzero.errors.exceptions import NotFoundError, ValidationError
from kitchzero.models.approval import WasteEntryRequestData, decode_request_data
from kitchzero.models.waste import WasteEntryCreate
from kitchzero.repositories.audit_repo import AuditLogRepository
from kitchzero.services.waste_service import WasteService

OWNER = {"sub": "usr_owner", "role": "RESTAURANT_ADMIN", "tenant_id": "tn_pasta", "branch_id": None}
CHEF = {"sub": "usr_chef", "role": "BRANCH_ADMIN", "tenant_id": "tn_pasta", "branch_id": "br_downtown"}
GRILL_CHEF = {"sub": "usr_grill_chef", "role": "BRANCH_ADMIN", "tenant_id": "tn_grill", "branch_id": "br_grill"}
HARBOR = {"sub": "usr_harbor", "role": "BRANCH_ADMIN", "tenant_id": "tn_pasta", "branch_id": "br_harbor"}


def _raw(item: str, quantity: float) -> WasteEntryCreate:
    return WasteEntryCreate(
        waste_type="RAW", inventory_item_id=item, quantity=quantity, unit="KG", reason="EXPIRED",
    )


async def _stock(session, item_id: str) -> float:
    item = await session.get(InventoryItemRow, item_id, populate_existing=True)
    return item.current_stock


@pytest.mark.asyncio
async def test_cheap_raw_waste_approved_immediately(db_session, seeded):
    view = await WasteService(db_session).log_waste_entry(_raw("itm_tomato", 10), CHEF)

    assert view.status == "APPROVED"
    assert view.estimated_cost == pytest.approx(20.0)
    assert view.approval_id is None
    assert await _stock(db_session, "itm_tomato") == 190.0

    events = await AuditLogRepository(db_session).list_by_resource(view.id)
    assert [e.event for e in events] == ["WASTE_ENTRY_LOGGED"]


@pytest.mark.asyncio
async def test_costly_waste_needs_approval(db_session, seeded):
    view = await WasteService(db_session).log_waste_entry(_raw("itm_cheese", 10), CHEF)

    assert view.status == "PENDING"
    assert view.estimated_cost == pytest.approx(120.0)
    # Stock leaves the shelf whether or not the entry is approved
    assert await _stock(db_session, "itm_cheese") == 30.0

    approval = await db_session.get(ApprovalRequestRow, view.approval_id)
    assert approval.type == "WASTE_ENTRY"
    assert approval.priority == "HIGH"
    assert approval.title == "Waste Entry: RAW - $120.00"
    payload = decode_request_data(approval.request_data)
    assert isinstance(payload, WasteEntryRequestData)
    assert payload.estimated_cost == pytest.approx(120.0)


@pytest.mark.asyncio
async def test_waste_just_over_threshold_is_medium(db_session, seeded):
    view = await WasteService(db_session).log_waste_entry(_raw("itm_cheese", 5), CHEF)
    approval = await db_session.get(ApprovalRequestRow, view.approval_id)
    assert approval.priority == "MEDIUM"


@pytest.mark.asyncio
async def test_approver_waste_never_gated(db_session, seeded):
    view = await WasteService(db_session).log_waste_entry(_raw("itm_cheese", 10), OWNER)
    assert view.status == "APPROVED"
    assert view.approval_id is None


@pytest.mark.asyncio
async def test_product_waste_scales_recipe(db_session, seeded):
    data = WasteEntryCreate(
        waste_type="PRODUCT", recipe_id="rcp_pizza", quantity=2, unit="PIECES", reason="OVERCOOKED",
    )
    view = await WasteService(db_session).log_waste_entry(data, CHEF)

    # Half a batch: 1 kg tomatoes at 2.0 plus 0.5 kg cheese at 12.0
    assert view.estimated_cost == pytest.approx(8.0)
    assert view.recipe.name == "Margherita"
    assert await _stock(db_session, "itm_tomato") == pytest.approx(199.0)
    assert await _stock(db_session, "itm_cheese") == pytest.approx(39.5)


@pytest.mark.asyncio
async def test_insufficient_stock_rolls_back(db_session, seeded):
    with pytest.raises(ValidationError):
        await WasteService(db_session).log_waste_entry(_raw("itm_cheese", 100), CHEF)
    assert await _stock(db_session, "itm_cheese") == 40.0


@pytest.mark.asyncio
async def test_tenant_threshold_override(db_session, seeded):
    view = await WasteService(db_session).log_waste_entry(_raw("itm_steak", 5), GRILL_CHEF)
    assert view.estimated_cost == pytest.approx(200.0)
    assert view.status == "APPROVED"


@pytest.mark.asyncio
async def test_unknown_recipe_not_found(db_session, seeded):
    data = WasteEntryCreate(
        waste_type="PRODUCT", recipe_id="rcp_missing", quantity=1, unit="PIECES", reason="DROPPED",
    )
    with pytest.raises(NotFoundError):
        await WasteService(db_session).log_waste_entry(data, CHEF)


@pytest.mark.asyncio
async def test_item_from_another_branch_not_found(db_session, seeded):
    with pytest.raises(NotFoundError):
        await WasteService(db_session).log_waste_entry(_raw("itm_tomato", 5), HARBOR)
    assert await _stock(db_session, "itm_tomato") == 200.0


@pytest.mark.asyncio
async def test_recipe_with_other_branch_ingredients_not_found(db_session, seeded):
    data = WasteEntryCreate(
        waste_type="PRODUCT", recipe_id="rcp_pizza", quantity=4, unit="PIECES", reason="OVERCOOKED",
    )
    with pytest.raises(NotFoundError):
        await WasteService(db_session).log_waste_entry(data, HARBOR)
    assert await _stock(db_session, "itm_tomato") == 200.0
