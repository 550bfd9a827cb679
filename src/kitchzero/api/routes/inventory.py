"""Inventory adjustment routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.dependencies import CurrentUser, get_db
from kitchzero.models.inventory import InventoryAdjustmentCreate, InventoryAdjustmentView
from kitchzero.services.inventory_service import InventoryService

router = APIRouter(tags=["Inventory"])


@router.post("/inventory/adjustments", status_code=201, response_model=InventoryAdjustmentView)
async def request_inventory_adjustment(
    data: InventoryAdjustmentCreate,
    user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Adjust stock directly, or open an approval request for roles that need one."""
    return await InventoryService(db).request_inventory_adjustment(data, user)
