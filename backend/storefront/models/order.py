"""
Order model - a placed order with its frozen item snapshot and audit trail.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Integer, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.database import Base, JSONDocument


class PaymentStatus(str, Enum):
    """Payment verification state."""

    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class OrderStatus(str, Enum):
    """Fulfillment state."""

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    """Accepted payment channels."""

    MOBILE_BANKING = "mobile_banking"
    ESEWA = "esewa"
    KHALTI = "khalti"
    CASH = "cash"
    CARD = "card"


class Order(Base):
    """Customer order. Never deleted; mutated only through status transitions."""

    __tablename__ = "orders"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    order_number: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        index=True,
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)

    # Frozen snapshot of product data at purchase time
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSONDocument, nullable=False)

    # Financial
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    promo_code: Mapped[Optional[str]] = mapped_column(String(20))

    shipping_address: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)

    # Payment
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)
    transaction_ref: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_proof_image: Mapped[str] = mapped_column(Text, nullable=False)

    # Status
    payment_status: Mapped[str] = mapped_column(
        String(20),
        default=PaymentStatus.PENDING.value,
        index=True,
    )
    order_status: Mapped[str] = mapped_column(
        String(20),
        default=OrderStatus.PENDING.value,
        index=True,
    )
    status_history: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        default=list,
    )

    # Delivery
    tracking_number: Mapped[Optional[str]] = mapped_column(String(100))
    deliverer_name: Mapped[Optional[str]] = mapped_column(String(100))
    deliverer_phone: Mapped[Optional[str]] = mapped_column(String(32))
    delivery_otp: Mapped[Optional[str]] = mapped_column(String(6))

    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Optimistic concurrency counter
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Order {self.order_number}>"


class OrderSequence(Base):
    """Per-day counter backing order number allocation."""

    __tablename__ = "order_sequences"

    day: Mapped[str] = mapped_column(String(8), primary_key=True)  # YYYYMMDD
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<OrderSequence {self.day}={self.last_value}>"
