"""Waste entry repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from kitchzero.db.models.waste import WasteEntryRow
from kitchzero.repositories.base import BaseRepository


class WasteEntryRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, WasteEntryRow)
