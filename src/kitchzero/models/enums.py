"""String enums shared by the ORM rows, pydantic models and services."""

from enum import StrEnum


class UserRole(StrEnum):
    KITCHZERO_ADMIN = "KITCHZERO_ADMIN"
    RESTAURANT_ADMIN = "RESTAURANT_ADMIN"
    BRANCH_ADMIN = "BRANCH_ADMIN"


class ApprovalType(StrEnum):
    INVENTORY_ADJUSTMENT = "INVENTORY_ADJUSTMENT"
    WASTE_ENTRY = "WASTE_ENTRY"


class ApprovalStatus(StrEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


TERMINAL_STATUSES = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED})


class Priority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class UrgencyLevel(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class AdjustmentType(StrEnum):
    RECEIVED = "RECEIVED"
    SOLD = "SOLD"
    WASTE = "WASTE"
    TRANSFER = "TRANSFER"
    COUNT = "COUNT"
    DAMAGED = "DAMAGED"
    THEFT = "THEFT"
    OTHER = "OTHER"


class WasteType(StrEnum):
    RAW = "RAW"
    PRODUCT = "PRODUCT"


class WasteReason(StrEnum):
    EXPIRED = "EXPIRED"
    SPOILED = "SPOILED"
    OVERCOOKED = "OVERCOOKED"
    DROPPED = "DROPPED"
    CONTAMINATED = "CONTAMINATED"
    WRONG_ORDER = "WRONG_ORDER"
    EXCESS_PREP = "EXCESS_PREP"
    CUSTOMER_RETURN = "CUSTOMER_RETURN"
    QUALITY_ISSUE = "QUALITY_ISSUE"
    EQUIPMENT_FAILURE = "EQUIPMENT_FAILURE"
    OTHER = "OTHER"


class Unit(StrEnum):
    KG = "KG"
    GRAMS = "GRAMS"
    LITERS = "LITERS"
    ML = "ML"
    PIECES = "PIECES"
    BOXES = "BOXES"


class AuditAction(StrEnum):
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
