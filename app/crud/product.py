from typing import Optional, Iterable

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.core.errors import ConflictError
from app.models.menu.category import Category
from app.models.menu.product import Product
from app.schemas.product import CategoryCreate, ProductCreate, ProductUpdate
from app.utils.text import slugify


# -----------------------
# Categories
# -----------------------

async def get_categories(db: AsyncSession, tenant_id: str, active_only: bool = True):
    query = select(Category).where(Category.tenant_id == tenant_id)
    if active_only:
        query = query.where(Category.is_active == True)
    result = await db.execute(query.order_by(Category.sort_order.asc(), Category.name.asc()))
    return result.scalars().all()


async def get_category(db: AsyncSession, tenant_id: str, category_id: str) -> Optional[Category]:
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.tenant_id == tenant_id)
    )
    return result.scalar_one_or_none()


async def get_category_by_slug(db: AsyncSession, tenant_id: str, slug: str) -> Optional[Category]:
    result = await db.execute(
        select(Category).where(Category.slug == slug, Category.tenant_id == tenant_id)
    )
    return result.scalar_one_or_none()


async def create_category(db: AsyncSession, tenant_id: str, payload: CategoryCreate) -> Category:
    slug = slugify(payload.slug or payload.name)
    if await get_category_by_slug(db, tenant_id, slug):
        raise ConflictError(f"Category '{slug}' already exists", code="CATEGORY_EXISTS")

    category = Category(
        tenant_id=tenant_id,
        name=payload.name.strip(),
        slug=slug,
        sort_order=payload.sort_order,
        is_active=payload.is_active,
    )
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


async def get_categories_with_products(db: AsyncSession, tenant_id: str):
    """Active categories in display order, each with its active products."""
    categories = await get_categories(db, tenant_id, active_only=True)
    products = await get_products(db, tenant_id, is_active=True)

    grouped = {c.id: [] for c in categories}
    for p in products:
        if p.category_id in grouped:
            grouped[p.category_id].append(p)

    return [(c, grouped[c.id]) for c in categories]


# -----------------------
# Products
# -----------------------

def _product_query(tenant_id: str):
    return (
        select(Product)
        .where(Product.tenant_id == tenant_id)
        .options(selectinload(Product.category))
    )


async def get_products(
    db: AsyncSession,
    tenant_id: str,
    category_id: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_popular: Optional[bool] = None,
):
    query = _product_query(tenant_id)
    if category_id is not None:
        query = query.where(Product.category_id == category_id)
    if is_active is not None:
        query = query.where(Product.is_active == is_active)
    if is_popular is not None:
        query = query.where(Product.is_popular == is_popular)
    result = await db.execute(query.order_by(Product.sort_order.asc(), Product.name.asc()))
    return result.scalars().all()


async def get_product(db: AsyncSession, tenant_id: str, product_id: str) -> Optional[Product]:
    result = await db.execute(_product_query(tenant_id).where(Product.id == product_id))
    return result.scalar_one_or_none()


async def get_orderable_products(db: AsyncSession, tenant_id: str, product_ids: Iterable[str]) -> dict:
    """Active products of this tenant among ``product_ids``, keyed by id."""
    ids = list(set(product_ids))
    if not ids:
        return {}
    result = await db.execute(
        select(Product).where(
            Product.id.in_(ids),
            Product.tenant_id == tenant_id,
            Product.is_active == True,
        )
    )
    return {p.id: p for p in result.scalars().all()}


async def create_product(db: AsyncSession, tenant_id: str, payload: ProductCreate) -> Product:
    product = Product(tenant_id=tenant_id, **payload.model_dump())
    db.add(product)
    await db.commit()
    return await get_product(db, tenant_id, product.id)


async def update_product(db: AsyncSession, tenant_id: str, product_id: str, updates: ProductUpdate) -> Optional[Product]:
    product = await get_product(db, tenant_id, product_id)
    if not product:
        return None

    for key, value in updates.model_dump(exclude_unset=True).items():
        setattr(product, key, value)

    await db.commit()
    # expire_on_commit is off; expire so the reload picks up a changed category
    db.expire(product)
    return await get_product(db, tenant_id, product_id)
