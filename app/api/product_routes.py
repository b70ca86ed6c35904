from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_staff
from app.core.errors import NotFoundError, ValidationError
from app.core.responses import success_response
from app.crud import product as product_crud
from app.db import get_db
from app.models.user import User, UserRole
from app.schemas.product import (
    CategoryCreate,
    CategoryRead,
    CategoryWithProducts,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from app.utils.tenant import TenantContext, get_current_tenant

router = APIRouter()

catalog_editor = require_staff(UserRole.OWNER, UserRole.MANAGER)


async def _ensure_category(db: AsyncSession, tenant_id: str, category_id: str) -> None:
    if not await product_crud.get_category(db, tenant_id, category_id):
        raise ValidationError("Category does not belong to this restaurant", code="INVALID_CATEGORY")


# -----------------------
# Public catalog
# -----------------------

@router.get("")
async def list_products(
    category_id: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_popular: Optional[bool] = None,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    products = await product_crud.get_products(
        db, tenant.id, category_id=category_id, is_active=is_active, is_popular=is_popular
    )
    return success_response([ProductRead.model_validate(p) for p in products])


@router.get("/by-category")
async def products_by_category(
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    grouped = await product_crud.get_categories_with_products(db, tenant.id)
    data = [
        CategoryWithProducts(
            **CategoryRead.model_validate(category).model_dump(),
            products=[ProductRead.model_validate(p) for p in products],
        )
        for category, products in grouped
    ]
    return success_response(data)


@router.get("/categories")
async def list_categories(
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    categories = await product_crud.get_categories(db, tenant.id)
    return success_response([CategoryRead.model_validate(c) for c in categories])


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    product = await product_crud.get_product(db, tenant.id, product_id)
    if not product:
        raise NotFoundError("Product not found", code="PRODUCT_NOT_FOUND")
    return success_response(ProductRead.model_validate(product))


# -----------------------
# Catalog management
# -----------------------

@router.post("/categories", status_code=201)
async def create_category(
    payload: CategoryCreate,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(catalog_editor),
):
    category = await product_crud.create_category(db, tenant.id, payload)
    return success_response(CategoryRead.model_validate(category), message="Category created")


@router.post("", status_code=201)
async def create_product(
    payload: ProductCreate,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(catalog_editor),
):
    await _ensure_category(db, tenant.id, payload.category_id)
    product = await product_crud.create_product(db, tenant.id, payload)
    return success_response(ProductRead.model_validate(product), message="Product created")


@router.patch("/{product_id}")
async def update_product(
    product_id: str,
    updates: ProductUpdate,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(catalog_editor),
):
    if updates.category_id is not None:
        await _ensure_category(db, tenant.id, updates.category_id)
    product = await product_crud.update_product(db, tenant.id, product_id, updates)
    if not product:
        raise NotFoundError("Product not found", code="PRODUCT_NOT_FOUND")
    return success_response(ProductRead.model_validate(product), message="Product updated")
