from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_staff
from app.core.config import settings
from app.core.errors import NotFoundError
from app.core.responses import success_response
from app.crud import order as order_crud
from app.db import get_db
from app.models.customer.order import OrderStatus, OrderType
from app.models.user import User
from app.schemas.order import OrderCreate, OrderRead, OrderStatusUpdate, OrderTracking
from app.services import orders as order_service
from app.services.notifications import NotificationHub, get_notification_hub
from app.utils.tenant import TenantContext, get_current_tenant

router = APIRouter()


# -----------------------
# Public checkout
# -----------------------

@router.post("", status_code=201)
async def create_order(
    payload: OrderCreate,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    notifier: NotificationHub = Depends(get_notification_hub),
):
    order = await order_service.create_order(db, tenant, payload, notifier=notifier)
    return success_response(order_service.build_receipt(order), message="Order created successfully")


@router.get("/track/{order_number}")
async def track_order(
    order_number: str,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    order = await order_service.track_order(db, tenant, order_number)
    return success_response(OrderTracking.model_validate(order))


# -----------------------
# Staff
# -----------------------

@router.get("")
async def list_orders(
    status: Optional[OrderStatus] = None,
    type: Optional[OrderType] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=200),
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff()),
):
    orders = await order_crud.list_orders(
        db, tenant.id, status=status, order_type=type, limit=limit or settings.order_list_limit
    )
    return success_response([OrderRead.model_validate(o) for o in orders])


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff()),
):
    order = await order_crud.get_order(db, tenant.id, order_id)
    if not order:
        raise NotFoundError("Order not found", code="ORDER_NOT_FOUND")
    return success_response(OrderRead.model_validate(order))


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: str,
    update: OrderStatusUpdate,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    notifier: NotificationHub = Depends(get_notification_hub),
    user: User = Depends(require_staff()),
):
    order = await order_service.update_order_status(db, tenant, order_id, update, notifier=notifier)
    return success_response(OrderRead.model_validate(order), message="Order status updated")
