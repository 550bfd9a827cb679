"""Waste entry table."""

from sqlalchemy import JSON, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kitchzero.db.base import Base, TimestampMixin


class WasteEntryRow(Base, TimestampMixin):
    __tablename__ = "waste_entries"

    waste_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    branch_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("branches.branch_id"), nullable=True, index=True
    )
    waste_type: Mapped[str] = mapped_column(String(20), nullable=False)
    inventory_item_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("inventory_items.item_id"), nullable=True
    )
    recipe_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("recipes.recipe_id"), nullable=True
    )
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[str] = mapped_column(String(50), nullable=False)
    reason_detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    estimated_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    approval_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("approval_requests.approval_request_id"), nullable=True, index=True
    )
    created_by: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.user_id"), nullable=False
    )
