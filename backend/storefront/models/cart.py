"""
CartItem model - one line of a user's server-side cart.
"""
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Integer, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.database import Base


class CartItem(Base):
    """Cart line, unique per (user, product, color, size)."""

    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "product_id", "color", "size",
            name="uq_cart_items_user_variant",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Empty string means "no variant" so the unique constraint still applies
    color: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    size: Mapped[str] = mapped_column(String(50), default="", nullable=False)

    # Keeps cart order stable across reads
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<CartItem {self.product_id} x{self.quantity}>"
