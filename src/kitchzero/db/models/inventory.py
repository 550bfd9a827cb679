"""Inventory item, recipe and adjustment tables."""

from sqlalchemy import Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kitchzero.db.base import Base, TimestampMixin


class InventoryItemRow(Base, TimestampMixin):
    __tablename__ = "inventory_items"

    item_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("tenants.tenant_id"), nullable=False, index=True
    )
    branch_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("branches.branch_id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    current_stock: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    average_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    min_stock_level: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)


class RecipeRow(Base, TimestampMixin):
    __tablename__ = "recipes"

    recipe_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("tenants.tenant_id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    yield_quantity: Mapped[float] = mapped_column("yield", Float, nullable=False, default=1.0)


class RecipeIngredientRow(Base):
    __tablename__ = "recipe_ingredients"

    ingredient_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    recipe_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("recipes.recipe_id"), nullable=False, index=True
    )
    inventory_item_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("inventory_items.item_id"), nullable=False
    )
    quantity: Mapped[float] = mapped_column(Float, nullable=False)


class InventoryAdjustmentRow(Base, TimestampMixin):
    __tablename__ = "inventory_adjustments"

    adjustment_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    branch_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("branches.branch_id"), nullable=True, index=True
    )
    inventory_item_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("inventory_items.item_id"), nullable=False, index=True
    )
    adjustment_type: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    approval_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("approval_requests.approval_request_id"), nullable=True, index=True
    )
    created_by: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.user_id"), nullable=False
    )
