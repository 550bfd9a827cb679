"""Waste logging routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.dependencies import CurrentUser, get_db
from kitchzero.models.waste import WasteEntryCreate, WasteEntryView
from kitchzero.services.waste_service import WasteService

router = APIRouter(tags=["Waste"])


@router.post("/waste/entries", status_code=201, response_model=WasteEntryView)
async def log_waste_entry(
    data: WasteEntryCreate,
    user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    return await WasteService(db).log_waste_entry(data, user)
