"""Pydantic models for inventory adjustments."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from kitchzero.models.enums import AdjustmentType, ApprovalStatus


class InventoryAdjustmentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    inventory_item_id: str
    adjustment_type: AdjustmentType
    quantity: float = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=500)
    notes: str | None = Field(None, max_length=2000)


class InventoryItemSummary(BaseModel):
    id: str
    name: str
    current_stock: float | None = None
    unit: str | None = None


class InventoryAdjustmentView(BaseModel):
    id: str
    inventory_item_id: str
    adjustment_type: AdjustmentType
    quantity: float
    reason: str
    notes: str | None = None
    status: ApprovalStatus
    approval_id: str | None = None
    created_by: str
    created_at: datetime | None = None
    inventory_item: InventoryItemSummary | None = None
