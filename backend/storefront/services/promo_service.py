"""
Promo code service - lookup plus evaluation, and admin maintenance.
"""
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import NotFoundError, PromoCodeRejected, ValidationError
from storefront.core.logging import get_logger
from storefront.models.promo_code import PromoCode
from storefront.repositories.promo_code import PromoCodeRepository
from storefront.schemas.common import naive_utc
from storefront.services.promo_evaluator import PromoEvaluation, PromoRejection, evaluate

logger = get_logger(__name__)


class PromoCodeService:
    """Validates codes for checkout and manages them for admins."""

    def __init__(self, session: AsyncSession) -> None:
        self.repo = PromoCodeRepository(session)

    async def validate(
        self,
        code: str,
        cart_subtotal: Decimal,
        categories: Iterable[str] = (),
        *,
        now: Optional[datetime] = None,
    ) -> tuple[PromoCode, PromoEvaluation]:
        """
        Look up `code` and evaluate it against the cart.

        Raises PromoCodeRejected with the failing reason. Read-only.
        """
        promo = await self.repo.get_by_code(code)
        result = evaluate(promo, cart_subtotal, categories, now=now)
        if not result.ok:
            logger.info(
                "Promo code rejected",
                code=code.strip().upper(),
                reason=result.reason.value if result.reason else None,
            )
            raise PromoCodeRejected(result.reason.value, result.message or "Invalid promo code")
        return promo, result  # type: ignore[return-value]

    async def redeem(self, promo: PromoCode) -> None:
        """Consume one use of `promo` inside the caller's transaction."""
        if not await self.repo.consume_usage(promo):
            raise PromoCodeRejected(
                PromoRejection.USAGE_EXHAUSTED.value,
                "Promo code usage limit reached",
            )

    async def get(self, promo_id: str) -> PromoCode:
        promo = await self.repo.get_by_id(promo_id)
        if promo is None:
            raise NotFoundError("Promo code", promo_id)
        return promo

    async def list_all(self) -> list[PromoCode]:
        return await self.repo.list_all()

    async def create(self, data: dict[str, Any]) -> PromoCode:
        if await self.repo.get_by_code(data["code"]):
            raise ValidationError("Promo code already exists")
        promo = await self.repo.create({**data, "usage_count": 0})
        logger.info("Promo code created", code=promo.code)
        return promo

    async def update(self, promo_id: str, changes: dict[str, Any]) -> PromoCode:
        """Apply a partial update; explicit nulls clear optional limits."""
        promo = await self.get(promo_id)

        valid_from = changes.get("valid_from", promo.valid_from)
        valid_to = changes.get("valid_to", promo.valid_to)
        if valid_from is None or valid_to is None:
            raise ValidationError("validFrom and validTo cannot be cleared")
        if naive_utc(valid_from) > naive_utc(valid_to):
            raise ValidationError("validFrom must not be after validTo")

        usage_limit = changes.get("usage_limit", promo.usage_limit)
        if usage_limit is not None and usage_limit < promo.usage_count:
            raise ValidationError(
                f"usageLimit cannot be lower than the current usage count ({promo.usage_count})"
            )

        for required in ("description", "discount_percentage", "is_active"):
            if required in changes and changes[required] is None:
                raise ValidationError(f"{required} cannot be null")

        promo = await self.repo.update(promo, changes, exclude_none=False)
        logger.info("Promo code updated", code=promo.code, fields=sorted(changes))
        return promo

    async def delete(self, promo_id: str) -> None:
        promo = await self.get(promo_id)
        await self.repo.delete(promo)
        logger.info("Promo code deleted", code=promo.code)

    async def stats(self) -> dict:
        return await self.repo.get_stats()
