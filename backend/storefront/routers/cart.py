"""
Cart API routes.
"""
from typing import Annotated, Optional, Union

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db_session
from storefront.core.security import AuthenticatedUser
from storefront.schemas.cart import CartItemIn, CartMergeRequest, CartResponse, LocalCartLine
from storefront.services.cart_merge import CartLine
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


async def get_cart_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> CartService:
    """Dependency to get cart service."""
    return CartService(session)


def _to_lines(items: list[LocalCartLine]) -> list[CartLine]:
    return [CartLine.of(i.product_id, i.quantity, i.color, i.size) for i in items]


@router.get("", response_model=CartResponse)
async def get_cart(
    user: AuthenticatedUser,
    service: Annotated[CartService, Depends(get_cart_service)],
) -> CartResponse:
    """The caller's cart with live prices and stock flags."""
    return await service.get_cart(user.id)


@router.post("", response_model=CartResponse)
async def save_cart(
    payload: Union[CartItemIn, list[LocalCartLine]],
    user: AuthenticatedUser,
    service: Annotated[CartService, Depends(get_cart_service)],
) -> CartResponse:
    """
    Add a single item, or sync a whole device cart.

    A single item increases the quantity of a matching line (or overwrites
    it with `replace: true`). An array is merged into the server cart.
    """
    if isinstance(payload, list):
        return await service.merge(user.id, _to_lines(payload))

    line = CartLine.of(payload.product_id, payload.quantity, payload.color, payload.size)
    return await service.add_item(user.id, line, replace_quantity=payload.replace)


@router.post("/merge", response_model=CartResponse)
async def merge_cart(
    request: CartMergeRequest,
    user: AuthenticatedUser,
    service: Annotated[CartService, Depends(get_cart_service)],
) -> CartResponse:
    """Reconcile a device-held cart with the server cart after login."""
    return await service.merge(user.id, _to_lines(request.items))


@router.delete("", response_model=CartResponse)
async def delete_cart_items(
    user: AuthenticatedUser,
    service: Annotated[CartService, Depends(get_cart_service)],
    product_id: Optional[str] = Query(None, alias="productId"),
    color: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
) -> CartResponse:
    """Remove one product (optionally one variant), or clear the cart."""
    if not product_id:
        return await service.clear(user.id)
    return await service.remove_item(user.id, product_id, color, size)
