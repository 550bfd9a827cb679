"""Tests for approval request payload models."""

import pytest
from pydantic import ValidationError

from kitchzero.models.approval import (
    ApprovalDecision,
    ApprovalRequestCreate,
    InventoryAdjustmentRequestData,
    WasteEntryRequestData,
    decode_request_data,
    encode_request_data,
)
from kitchzero.models.enums import ApprovalStatus, ApprovalType

ADJUSTMENT = {
    "inventory_item_id": "itm_tomato",
    "adjustment_type": "COUNT",
    "quantity": 12,
    "reason": "Monthly stock count",
}


def test_request_data_tag_defaults_to_request_type():
    request = ApprovalRequestCreate.model_validate({
        "type": "INVENTORY_ADJUSTMENT",
        "title": "Count correction",
        "request_data": ADJUSTMENT,
    })
    assert isinstance(request.request_data, InventoryAdjustmentRequestData)
    assert request.priority is None


def test_mismatched_payload_rejected():
    with pytest.raises(ValidationError):
        ApprovalRequestCreate.model_validate({
            "type": "WASTE_ENTRY",
            "title": "Wrong payload",
            "request_data": {**ADJUSTMENT, "type": "INVENTORY_ADJUSTMENT"},
        })


def test_unknown_fields_rejected():
    with pytest.raises(ValidationError):
        ApprovalRequestCreate.model_validate({
            "type": "INVENTORY_ADJUSTMENT",
            "title": "Extra",
            "request_data": ADJUSTMENT,
            "status": "APPROVED",
        })


def test_stored_payload_decodes_to_its_variant():
    waste = WasteEntryRequestData(
        waste_type="RAW",
        inventory_item_id="itm_tomato",
        quantity=3,
        unit="KG",
        reason="SPOILED",
        estimated_cost=6.0,
    )
    decoded = decode_request_data(encode_request_data(waste))
    assert isinstance(decoded, WasteEntryRequestData)
    assert decoded.type == ApprovalType.WASTE_ENTRY
    assert decoded.estimated_cost == 6.0


def test_raw_waste_requires_item():
    with pytest.raises(ValidationError):
        WasteEntryRequestData(waste_type="RAW", quantity=1, unit="KG", reason="SPOILED")


def test_decision_must_be_terminal():
    assert ApprovalDecision(status="APPROVED").status == ApprovalStatus.APPROVED
    with pytest.raises(ValidationError):
        ApprovalDecision(status="PENDING")
