"""Pydantic models for waste logging."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from kitchzero.models.enums import ApprovalStatus, Unit, WasteReason, WasteType
from kitchzero.models.inventory import InventoryItemSummary


class WasteEntryCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    waste_type: WasteType
    inventory_item_id: str | None = None
    recipe_id: str | None = None
    quantity: float = Field(..., gt=0)
    unit: Unit
    reason: WasteReason
    reason_detail: str | None = Field(None, max_length=1000)
    location: str | None = Field(None, max_length=200)
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_source(self):
        if self.waste_type == WasteType.RAW and not self.inventory_item_id:
            raise ValueError("RAW waste requires inventory_item_id")
        if self.waste_type == WasteType.PRODUCT and not self.recipe_id:
            raise ValueError("PRODUCT waste requires recipe_id")
        return self


class RecipeSummary(BaseModel):
    id: str
    name: str


class WasteEntryView(BaseModel):
    id: str
    waste_type: WasteType
    quantity: float
    unit: Unit
    reason: WasteReason
    reason_detail: str | None = None
    estimated_cost: float
    status: ApprovalStatus
    approval_id: str | None = None
    created_by: str
    created_at: datetime | None = None
    inventory_item: InventoryItemSummary | None = None
    recipe: RecipeSummary | None = None
