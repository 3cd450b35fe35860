"""
Product catalog API routes.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db_session
from storefront.core.errors import NotFoundError
from storefront.core.logging import get_logger
from storefront.core.security import AdminUser
from storefront.repositories.product import ProductRepository
from storefront.schemas.product import (
    PaginatedProductsResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/products", tags=["products"])
admin_router = APIRouter(prefix="/admin/products", tags=["admin"])


async def get_product_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ProductRepository:
    """Dependency to get product repository."""
    return ProductRepository(session)


@router.get("", response_model=PaginatedProductsResponse)
async def list_products(
    repo: Annotated[ProductRepository, Depends(get_product_repository)],
    category: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
) -> PaginatedProductsResponse:
    """Active products, newest first."""
    products, total = await repo.list_active(
        category=category,
        featured=featured,
        skip=(page - 1) * page_size,
        limit=page_size,
    )
    return PaginatedProductsResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        has_more=page * page_size < total,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    repo: Annotated[ProductRepository, Depends(get_product_repository)],
) -> ProductResponse:
    product = await repo.get_by_id(product_id)
    if product is None or not product.is_active:
        raise NotFoundError("Product", product_id)
    return ProductResponse.model_validate(product)


@admin_router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    admin: AdminUser,
    repo: Annotated[ProductRepository, Depends(get_product_repository)],
) -> ProductResponse:
    product = await repo.create(product_data.model_dump(by_alias=False))
    logger.info("Created product", product_id=str(product.id), name=product.name)
    return ProductResponse.model_validate(product)


@admin_router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_update: ProductUpdate,
    admin: AdminUser,
    repo: Annotated[ProductRepository, Depends(get_product_repository)],
) -> ProductResponse:
    """Update catalog data or stock. Existing orders keep their snapshots."""
    product = await repo.get_by_id(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)

    update_data = product_update.model_dump(exclude_unset=True, by_alias=False)
    product = await repo.update(product, update_data, exclude_none=False)

    logger.info("Updated product", product_id=product_id, fields=sorted(update_data))
    return ProductResponse.model_validate(product)
