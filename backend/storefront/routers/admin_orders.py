"""
Admin order dashboard routes.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from storefront.core.security import AdminUser
from storefront.routers.orders import get_order_service
from storefront.schemas.order import (
    OrderSummary,
    PaginatedOrdersResponse,
    StockWarningResponse,
)
from storefront.services.order_service import OrderService, to_response

router = APIRouter(prefix="/admin/orders", tags=["admin"])


@router.get("", response_model=PaginatedOrdersResponse)
async def list_orders(
    admin: AdminUser,
    service: Annotated[OrderService, Depends(get_order_service)],
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(
        None,
        description="pending|verified|rejected filter payment status; other values filter order status",
    ),
) -> PaginatedOrdersResponse:
    """All orders, newest first, paginated."""
    result = await service.list_paginated(status=status, page=page, limit=limit)
    result["items"] = [to_response(order, admin) for order in result["items"]]
    return PaginatedOrdersResponse(**result)


@router.get("/summary", response_model=OrderSummary)
async def get_summary(
    admin: AdminUser,
    service: Annotated[OrderService, Depends(get_order_service)],
) -> OrderSummary:
    """Order counts per status and revenue from verified payments."""
    return OrderSummary(**await service.summary())


@router.get("/{order_id}/stock-warnings", response_model=list[StockWarningResponse])
async def get_stock_warnings(
    order_id: str,
    admin: AdminUser,
    service: Annotated[OrderService, Depends(get_order_service)],
) -> list[StockWarningResponse]:
    """
    Advisory stock check for an order awaiting payment verification.

    Never blocks verification.
    """
    warnings = await service.stock_warnings(order_id)
    return [
        StockWarningResponse(
            product_id=w.product_id,
            name=w.name,
            requested=w.requested,
            available=w.available,
            message=w.message,
        )
        for w in warnings
    ]
