"""User table."""

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from kitchzero.db.base import Base, TimestampMixin


class UserRow(Base, TimestampMixin):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    tenant_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("tenants.tenant_id"), nullable=True, index=True
    )
    branch_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("branches.branch_id"), nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
