from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.models.customer.order import Order, OrderStatus, OrderType


def _order_query(tenant_id: str):
    return (
        select(Order)
        .where(Order.tenant_id == tenant_id)
        .options(selectinload(Order.items))
        # always refresh from the row, instances may be cached in the session
        .execution_options(populate_existing=True)
    )


async def get_order(db: AsyncSession, tenant_id: str, order_id: str) -> Optional[Order]:
    result = await db.execute(_order_query(tenant_id).where(Order.id == order_id))
    return result.scalar_one_or_none()


async def get_order_by_number(db: AsyncSession, tenant_id: str, order_number: str) -> Optional[Order]:
    result = await db.execute(
        _order_query(tenant_id).where(Order.order_number == order_number.strip().upper())
    )
    return result.scalar_one_or_none()


async def list_orders(
    db: AsyncSession,
    tenant_id: str,
    status: Optional[OrderStatus] = None,
    order_type: Optional[OrderType] = None,
    limit: Optional[int] = 20,
):
    """Newest first."""
    query = _order_query(tenant_id)
    if status is not None:
        query = query.where(Order.status == status)
    if order_type is not None:
        query = query.where(Order.type == order_type)
    query = query.order_by(Order.created_at.desc())
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


async def get_orders_since(db: AsyncSession, tenant_id: str, since: Optional[datetime] = None):
    """Orders (with items) for analytics scans, newest first."""
    query = _order_query(tenant_id)
    if since is not None:
        query = query.where(Order.created_at >= since)
    result = await db.execute(query.order_by(Order.created_at.desc()))
    return result.scalars().all()


async def get_platform_orders_since(db: AsyncSession, since: Optional[datetime] = None):
    """Every tenant's orders. Super-admin analytics only."""
    query = select(Order)
    if since is not None:
        query = query.where(Order.created_at >= since)
    result = await db.execute(query.order_by(Order.created_at.desc()))
    return result.scalars().all()
