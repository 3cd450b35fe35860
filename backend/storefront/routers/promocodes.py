"""
Promo code API routes - checkout validation and admin management.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db_session
from storefront.core.security import AdminUser, AuthenticatedUser
from storefront.schemas.promo_code import (
    PromoCodeCreate,
    PromoCodeResponse,
    PromoCodeStats,
    PromoCodeUpdate,
    PromoCodeValidateRequest,
    PromoCodeValidateResponse,
)
from storefront.services.promo_service import PromoCodeService

router = APIRouter(prefix="/promocodes", tags=["promocodes"])
admin_router = APIRouter(prefix="/admin/promocodes", tags=["admin"])


async def get_promo_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PromoCodeService:
    """Dependency to get promo code service."""
    return PromoCodeService(session)


@router.post("/validate", response_model=PromoCodeValidateResponse)
async def validate_promo_code(
    request: PromoCodeValidateRequest,
    user: AuthenticatedUser,
    service: Annotated[PromoCodeService, Depends(get_promo_service)],
) -> PromoCodeValidateResponse:
    """
    Check a code against the cart and preview the discount.

    Read-only: usage is only consumed when an order is placed.
    """
    promo, evaluation = await service.validate(request.code, request.cart_total, request.categories)
    return PromoCodeValidateResponse(
        code=promo.code,
        discount_percentage=promo.discount_percentage,
        discount_amount=evaluation.discount_amount,
        description=promo.description,
    )


@admin_router.get("", response_model=list[PromoCodeResponse])
async def list_promo_codes(
    admin: AdminUser,
    service: Annotated[PromoCodeService, Depends(get_promo_service)],
) -> list[PromoCodeResponse]:
    """List all promo codes, newest first."""
    return [PromoCodeResponse.model_validate(p) for p in await service.list_all()]


@admin_router.get("/stats", response_model=PromoCodeStats)
async def get_promo_code_stats(
    admin: AdminUser,
    service: Annotated[PromoCodeService, Depends(get_promo_service)],
) -> PromoCodeStats:
    """Totals for the promo code dashboard widget."""
    return PromoCodeStats(**await service.stats())


@admin_router.post("", response_model=PromoCodeResponse, status_code=status.HTTP_201_CREATED)
async def create_promo_code(
    promo_data: PromoCodeCreate,
    admin: AdminUser,
    service: Annotated[PromoCodeService, Depends(get_promo_service)],
) -> PromoCodeResponse:
    """Create a promo code. Codes are stored upper-case and must be unique."""
    promo = await service.create(promo_data.model_dump(by_alias=False))
    return PromoCodeResponse.model_validate(promo)


@admin_router.get("/{promo_id}", response_model=PromoCodeResponse)
async def get_promo_code(
    promo_id: str,
    admin: AdminUser,
    service: Annotated[PromoCodeService, Depends(get_promo_service)],
) -> PromoCodeResponse:
    return PromoCodeResponse.model_validate(await service.get(promo_id))


@admin_router.put("/{promo_id}", response_model=PromoCodeResponse)
async def update_promo_code(
    promo_id: str,
    promo_update: PromoCodeUpdate,
    admin: AdminUser,
    service: Annotated[PromoCodeService, Depends(get_promo_service)],
) -> PromoCodeResponse:
    """Partial update; only the fields sent are changed."""
    changes = promo_update.model_dump(exclude_unset=True, by_alias=False)
    promo = await service.update(promo_id, changes)
    return PromoCodeResponse.model_validate(promo)


@admin_router.delete("/{promo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_promo_code(
    promo_id: str,
    admin: AdminUser,
    service: Annotated[PromoCodeService, Depends(get_promo_service)],
) -> None:
    await service.delete(promo_id)
