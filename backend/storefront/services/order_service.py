"""
Order service - checkout, status updates and order queries.

Wraps the pure state machine in order_state with persistence, promo
redemption, order numbering and access control. Everything one call does
happens in the request's transaction, so a failure at any step leaves no
partial order behind.
"""
import math
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from storefront.core.config import settings
from storefront.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from storefront.core.logging import get_logger
from storefront.core.security import CurrentUser
from storefront.models.order import Order, OrderStatus, PaymentStatus
from storefront.repositories.base import parse_uuid
from storefront.repositories.cart import CartRepository
from storefront.repositories.order import OrderRepository
from storefront.repositories.product import ProductRepository
from storefront.schemas.order import OrderCreate, OrderResponse, OrderUpdate
from storefront.services import order_state
from storefront.services.cart_merge import normalize_variant
from storefront.services.pricing import ZERO, LineSnapshot, compute_totals, round_money
from storefront.services.promo_service import PromoCodeService

logger = get_logger(__name__)


def format_order_number(prefix: str, day: str, sequence: int) -> str:
    """ORD-20250101-0001 style number."""
    return f"{prefix}-{day}-{sequence:04d}"


def to_response(order: Order, viewer: CurrentUser) -> OrderResponse:
    """Serialize an order for `viewer`; only the owner ever sees the delivery OTP."""
    response = OrderResponse.model_validate(order)
    if order.user_id != viewer.id:
        response.delivery_otp = None
    return response


class OrderService:
    """Order use cases for customers and admins."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.orders = OrderRepository(session)
        self.products = ProductRepository(session)
        self.carts = CartRepository(session)
        self.promos = PromoCodeService(session)

    async def create_order(
        self,
        user: CurrentUser,
        data: OrderCreate,
        *,
        now: Optional[datetime] = None,
    ) -> Order:
        """
        Place an order.

        Items come from the request or, when omitted, from the user's server
        cart. Names and prices are read from the catalog and frozen into the
        order; totals are always recomputed. A promo code is re-validated
        and its usage consumed in the same transaction.
        """
        now = now or datetime.now(timezone.utc)

        if data.items is not None:
            requested = [
                (item.product_id, item.quantity, item.color, item.size)
                for item in data.items
            ]
        else:
            requested = [
                (line.product_id, line.quantity, line.color, line.size)
                for line in await self.carts.get_lines(user.id)
            ]

        if not requested:
            raise ValidationError("Cart is empty")
        for product_id, quantity, _, _ in requested:
            if quantity < 1:
                raise ValidationError(f"Quantity for product {product_id} must be at least 1")

        products = await self.products.get_many(pid for pid, _, _, _ in requested)

        items: list[dict[str, Any]] = []
        lines: list[LineSnapshot] = []
        categories: set[str] = set()
        for product_id, quantity, color, size in requested:
            product = products.get(_canonical_id(product_id))
            if product is None or not product.is_active:
                raise ValidationError(f"Product {product_id} is not available")

            unit_price = round_money(product.effective_price)
            items.append(
                {
                    "product_id": str(product.id),
                    "name": product.name,
                    "unit_price": str(unit_price),
                    "quantity": quantity,
                    "image": product.image,
                    "color": normalize_variant(color) or None,
                    "size": normalize_variant(size) or None,
                }
            )
            lines.append(LineSnapshot(unit_price=unit_price, quantity=quantity))
            categories.add(product.category)

        discount = ZERO
        promo_code = None
        if data.promo_code:
            subtotal = compute_totals(lines).subtotal
            promo, evaluation = await self.promos.validate(
                data.promo_code, subtotal, categories, now=now
            )
            await self.promos.redeem(promo)
            discount = evaluation.discount_amount
            promo_code = promo.code

        totals = compute_totals(lines, discount)

        day = now.strftime("%Y%m%d")
        sequence = await self.orders.allocate_sequence(settings.order_number_prefix, day)
        order_number = format_order_number(settings.order_number_prefix, day, sequence)

        order = await self.orders.create(
            {
                "order_number": order_number,
                "user_id": user.id,
                "items": items,
                "subtotal": totals.subtotal,
                "discount": totals.discount,
                "shipping_cost": totals.shipping_cost,
                "tax_amount": totals.tax_amount,
                "total_amount": totals.total_amount,
                "promo_code": promo_code,
                "shipping_address": data.shipping_address.model_dump(by_alias=True),
                "payment_method": data.payment_method.value,
                "transaction_ref": data.transaction_ref,
                "payment_proof_image": str(data.payment_proof_image),
                "payment_status": PaymentStatus.PENDING.value,
                "order_status": OrderStatus.PENDING.value,
                "status_history": order_state.start_history(now=now),
                "notes": data.notes,
            }
        )
        await self.carts.clear(user.id)

        logger.info(
            "Order placed",
            order_number=order.order_number,
            user_id=user.id,
            items=len(items),
            total=str(totals.total_amount),
            promo_code=promo_code,
        )
        return order

    async def get_order_for(self, user: CurrentUser, order_id: str) -> Order:
        """An order visible to `user`: their own, or any order for admins."""
        order = await self.orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        if not user.is_admin and order.user_id != user.id:
            raise ForbiddenError("You can only view your own orders")
        return order

    async def list_for_user(self, user: CurrentUser) -> list[Order]:
        """The caller's orders; admins see all of them."""
        return await self.orders.list_for_user(None if user.is_admin else user.id)

    async def list_paginated(self, *, status: Optional[str], page: int, limit: int) -> dict[str, Any]:
        orders, total = await self.orders.list_paginated(
            status=status,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return {
            "items": orders,
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if total else 0,
        }

    async def summary(self) -> dict[str, Any]:
        return await self.orders.get_summary()

    async def apply_admin_update(
        self,
        order_id: str,
        update: OrderUpdate,
        *,
        now: Optional[datetime] = None,
    ) -> Order:
        """
        Apply one admin status change.

        Re-applying the current state changes nothing. A stale
        `expected_version`, or a concurrent writer, raises ConflictError.
        """
        now = now or datetime.now(timezone.utc)
        order = await self.orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        if update.expected_version is not None and update.expected_version != order.version:
            raise ConflictError(
                f"Order {order.order_number} was modified (version {order.version}); reload and retry"
            )

        previous = (order.payment_status, order.order_status)

        if update.payment_status == PaymentStatus.VERIFIED.value:
            changed = order_state.verify_payment(order, update.note, now)
            if changed and settings.decrement_stock_on_verify:
                await self._deduct_stock(order)
        elif update.payment_status == PaymentStatus.REJECTED.value:
            changed = order_state.reject_payment(order, update.note, now)
        elif update.order_status == OrderStatus.CANCELLED.value:
            changed = order_state.cancel(order, update.note, now)
        else:
            changed = order_state.advance_fulfillment(
                order,
                update.order_status,
                tracking_number=update.tracking_number,
                note=update.note,
                now=now,
            )
            if changed and order.order_status == OrderStatus.SHIPPED.value:
                order.deliverer_name = update.deliverer_name
                order.deliverer_phone = update.deliverer_phone
                order.delivery_otp = order_state.generate_delivery_otp()

        if not changed:
            return order

        await self._flush(order)
        logger.info(
            "Order status updated",
            order_number=order.order_number,
            from_status="/".join(previous),
            to_status=f"{order.payment_status}/{order.order_status}",
            version=order.version,
        )
        return order

    async def confirm_delivery(
        self,
        user: CurrentUser,
        order_id: str,
        otp: str,
        *,
        now: Optional[datetime] = None,
    ) -> Order:
        """Owner confirms receipt with the OTP handed out at shipping."""
        order = await self.orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        if order.user_id != user.id:
            raise ForbiddenError("Only the customer who placed the order can confirm delivery")

        if order_state.confirm_delivery(order, otp, now):
            await self._flush(order)
            logger.info("Delivery confirmed", order_number=order.order_number, user_id=user.id)
        return order

    async def stock_warnings(self, order_id: str) -> list[order_state.StockWarning]:
        order = await self.orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        products = await self.products.get_many(item["product_id"] for item in order.items)
        stock = {product_id: product.stock for product_id, product in products.items()}
        return order_state.stock_warnings(order, stock)

    async def _deduct_stock(self, order: Order) -> None:
        for item in order.items:
            if not await self.products.decrement_stock(item["product_id"], int(item["quantity"])):
                logger.warning(
                    "Insufficient stock on payment verification",
                    order_number=order.order_number,
                    product_id=item["product_id"],
                    quantity=item["quantity"],
                )

    async def _flush(self, order: Order) -> None:
        # A stale flush expires the instance, so attributes must be read first
        order_number = order.order_number
        try:
            await self.session.flush()
        except StaleDataError as exc:
            raise ConflictError(
                f"Order {order_number} was modified concurrently; reload and retry"
            ) from exc
        await self.session.refresh(order)


def _canonical_id(product_id: str) -> str:
    key = parse_uuid(product_id)
    return str(key) if key else str(product_id)
