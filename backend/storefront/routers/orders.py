"""
Order API routes - checkout, order history and admin status updates.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db_session
from storefront.core.logging import get_logger
from storefront.core.security import AdminUser, AuthenticatedUser
from storefront.schemas.order import (
    DeliveryConfirmation,
    OrderCreate,
    OrderResponse,
    OrderUpdate,
)
from storefront.services.order_service import OrderService, to_response

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


async def get_order_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> OrderService:
    """Dependency to get order service."""
    return OrderService(session)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    user: AuthenticatedUser,
    service: Annotated[OrderService, Depends(get_order_service)],
) -> OrderResponse:
    """
    Place an order from the submitted items (or the server cart).

    Totals are recomputed server-side; any client-sent prices are ignored.
    """
    order = await service.create_order(user, order_data)
    return to_response(order, user)


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    user: AuthenticatedUser,
    service: Annotated[OrderService, Depends(get_order_service)],
) -> list[OrderResponse]:
    """The caller's orders, newest first. Admins see every order."""
    orders = await service.list_for_user(user)
    return [to_response(order, user) for order in orders]


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    user: AuthenticatedUser,
    service: Annotated[OrderService, Depends(get_order_service)],
) -> OrderResponse:
    """Get a single order (owner or admin)."""
    order = await service.get_order_for(user, order_id)
    return to_response(order, user)


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    update: OrderUpdate,
    admin: AdminUser,
    service: Annotated[OrderService, Depends(get_order_service)],
) -> OrderResponse:
    """
    Apply one guarded status change.

    Either a payment decision (verified/rejected) or a fulfillment step
    (processing/shipped/delivered/cancelled). Shipping needs a tracking
    number. Pass expectedVersion to fail with 409 on concurrent edits.
    """
    order = await service.apply_admin_update(order_id, update)
    return to_response(order, admin)


@router.post("/{order_id}/confirm-delivery", response_model=OrderResponse)
async def confirm_delivery(
    order_id: str,
    confirmation: DeliveryConfirmation,
    user: AuthenticatedUser,
    service: Annotated[OrderService, Depends(get_order_service)],
) -> OrderResponse:
    """Customer confirms receipt using the delivery OTP."""
    order = await service.confirm_delivery(user, order_id, confirmation.delivery_otp)
    return to_response(order, user)
