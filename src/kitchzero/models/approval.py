"""Pydantic models for approval requests, decisions and their read models."""

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from kitchzero.models.common import Pagination
from kitchzero.models.enums import (
    TERMINAL_STATUSES,
    ApprovalStatus,
    ApprovalType,
    Priority,
    UrgencyLevel,
    UserRole,
)
from kitchzero.models.inventory import InventoryAdjustmentCreate, InventoryAdjustmentView
from kitchzero.models.waste import WasteEntryCreate, WasteEntryView


# ---------------------------------------------------------------------------
# Request payloads, tagged by approval type
# ---------------------------------------------------------------------------

class InventoryAdjustmentRequestData(InventoryAdjustmentCreate):
    type: Literal["INVENTORY_ADJUSTMENT"] = "INVENTORY_ADJUSTMENT"


class WasteEntryRequestData(WasteEntryCreate):
    type: Literal["WASTE_ENTRY"] = "WASTE_ENTRY"
    estimated_cost: float | None = Field(None, ge=0)


RequestData = Annotated[
    Union[InventoryAdjustmentRequestData, WasteEntryRequestData],
    Field(discriminator="type"),
]

_request_data_adapter: TypeAdapter = TypeAdapter(RequestData)


def encode_request_data(data: InventoryAdjustmentRequestData | WasteEntryRequestData) -> str:
    """Serialize a request payload for storage."""
    return data.model_dump_json()


def decode_request_data(raw: str) -> InventoryAdjustmentRequestData | WasteEntryRequestData:
    """Decode a stored payload back into its typed variant."""
    return _request_data_adapter.validate_json(raw)


class ApprovalRequestCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: ApprovalType
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    request_data: RequestData
    priority: Priority | None = None
    due_date: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _tag_request_data(cls, data):
        # Payloads may omit their tag; it defaults to the request type.
        if isinstance(data, dict):
            payload = data.get("request_data")
            if isinstance(payload, dict) and "type" not in payload and data.get("type"):
                data = {**data, "request_data": {**payload, "type": str(data["type"])}}
        return data

    @model_validator(mode="after")
    def _check_payload_matches_type(self):
        if self.request_data.type != self.type:
            raise ValueError(
                f"request_data of type {self.request_data.type} does not match request type {self.type}"
            )
        return self


class ApprovalDecision(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: ApprovalStatus
    reason: str | None = Field(None, max_length=2000)

    @field_validator("status")
    @classmethod
    def _terminal_only(cls, value: ApprovalStatus) -> ApprovalStatus:
        if value not in TERMINAL_STATUSES:
            raise ValueError("decision status must be APPROVED or REJECTED")
        return value


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------

class BranchSummary(BaseModel):
    id: str
    name: str


class RequesterSummary(BaseModel):
    id: str
    username: str
    role: UserRole
    branch: BranchSummary | None = None


class ApprovalRequestView(BaseModel):
    approval_request_id: str
    tenant_id: str
    type: ApprovalType
    title: str
    description: str | None = None
    request_data: str
    requested_by: str
    approver_ids: list[str]
    priority: Priority
    status: ApprovalStatus
    requested_at: datetime
    responded_at: datetime | None = None
    approved_by: str | None = None
    rejected_by: str | None = None
    approval_reason: str | None = None
    rejection_reason: str | None = None
    due_date: datetime | None = None
    requester: RequesterSummary | None = None


class ApprovalHistoryEntry(ApprovalRequestView):
    parsed_request_data: RequestData


class ApprovalDetailView(ApprovalHistoryEntry):
    inventory_adjustments: list[InventoryAdjustmentView] = Field(default_factory=list)
    waste_entries: list[WasteEntryView] = Field(default_factory=list)
    is_overdue: bool
    days_waiting: int
    urgency_level: UrgencyLevel


class ApprovalHistoryPage(BaseModel):
    approvals: list[ApprovalHistoryEntry]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

class ApprovalAnalyticsFilters(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start_date: datetime | None = None
    end_date: datetime | None = None
    type: ApprovalType | None = None
    status: ApprovalStatus | None = None


class GroupCounts(BaseModel):
    total: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0


class MonthlyTrendEntry(GroupCounts):
    month: str


class ApprovalAnalytics(BaseModel):
    total_requests: int
    approved_count: int
    rejected_count: int
    pending_count: int
    average_response_time: float
    by_type: dict[str, GroupCounts]
    by_priority: dict[str, GroupCounts]
    by_branch: dict[str, GroupCounts]
    monthly_trend: list[MonthlyTrendEntry]
