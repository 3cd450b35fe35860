"""
PromoCode model - percentage discount codes managed by admins.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.database import Base, JSONDocument


class PromoCode(Base):
    """Discount code. `usage_count` only ever grows."""

    __tablename__ = "promo_codes"
    __table_args__ = (
        CheckConstraint("valid_from <= valid_to", name="ck_promo_codes_window"),
        CheckConstraint(
            "discount_percentage >= 1 AND discount_percentage <= 100",
            name="ck_promo_codes_percentage",
        ),
        CheckConstraint(
            "usage_limit IS NULL OR usage_count <= usage_limit",
            name="ck_promo_codes_usage",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    # Stored upper-case
    code: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        index=True,
        nullable=False,
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)

    discount_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    max_discount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    min_purchase: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))

    valid_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    valid_to: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # None means every category; stored lower-case
    applicable_categories: Mapped[Optional[list[str]]] = mapped_column(JSONDocument)

    # None means unlimited
    usage_limit: Mapped[Optional[int]] = mapped_column(Integer)
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<PromoCode {self.code}>"
