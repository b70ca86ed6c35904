"""Order lifecycle: checkout and status transitions.

Both operations persist first and notify second. Notification is best
effort; a failure there is logged and never undoes a committed order.
"""
import logging
from typing import Optional

from sqlalchemy import update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import InvalidStatusTransitionError, NotFoundError, ValidationError
from app.crud import customer as customer_crud
from app.crud import order as order_crud
from app.crud import product as product_crud
from app.crud import tenant as tenant_crud
from app.models.customer.order import (
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
    STATUS_FLOW,
    TERMINAL_STATUSES,
)
from app.models.tenant import TenantSettings
from app.schemas.order import OrderCreate, OrderReceipt, OrderItemRead, OrderStatusUpdate, ReceiptCustomer
from app.services.notifications import NotificationHub, emit_new_order, emit_order_status
from app.services.pricing import calculate_order_pricing, round_money
from app.utils.tenant import TenantContext
from app.utils.timezones import to_utc_naive, utcnow

log = logging.getLogger(__name__)


def format_order_number(subdomain: str, number: int) -> str:
    return f"{subdomain.upper()}-{number:04d}"


def estimated_minutes(order_type: OrderType) -> int:
    """Placeholder heuristic: a fixed default per order type."""
    return {
        OrderType.DELIVERY: settings.estimated_time_delivery,
        OrderType.PICKUP: settings.estimated_time_pickup,
        OrderType.DINE_IN: settings.estimated_time_dine_in,
    }[order_type]


def status_message(status: OrderStatus) -> str:
    return f"Your order is now {status.value.lower()}"


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_order_request(payload: OrderCreate, tenant_settings: TenantSettings) -> None:
    if not payload.items:
        raise ValidationError("Order must contain at least one item")

    customer = payload.customer
    if _blank(customer.first_name) or _blank(customer.email) or _blank(customer.phone):
        raise ValidationError("Customer information is required")

    if payload.type == OrderType.DELIVERY:
        missing = [f for f in ("address", "city", "postal_code") if _blank(getattr(customer, f))]
        if missing:
            raise ValidationError(f"Delivery address is incomplete: missing {', '.join(missing)}")

    enabled = {
        OrderType.DELIVERY: tenant_settings.enable_delivery,
        OrderType.PICKUP: tenant_settings.enable_pickup,
        OrderType.DINE_IN: tenant_settings.enable_dine_in,
    }[payload.type]
    if not enabled:
        raise ValidationError(f"{payload.type.value} orders are not available for this restaurant")

    if payload.payment_method == PaymentMethod.CASH:
        if not tenant_settings.enable_cash_payment:
            raise ValidationError("Cash payment is not available for this restaurant")
    elif not tenant_settings.enable_online_payment:
        raise ValidationError("Online payment is not available for this restaurant")


async def create_order(
    db: AsyncSession,
    tenant: TenantContext,
    payload: OrderCreate,
    notifier: Optional[NotificationHub] = None,
) -> Order:
    """Validate, price and persist an order, then announce it to the tenant room.

    Customer, counter bump, order and items commit together; any failure rolls
    all of them back, so no partial order is ever visible.
    """
    try:
        tenant_settings = await tenant_crud.get_or_create_settings(db, tenant.id)
        validate_order_request(payload, tenant_settings)

        products = await product_crud.get_orderable_products(
            db, tenant.id, (item.product_id for item in payload.items)
        )
        for item in payload.items:
            if item.product_id not in products:
                raise NotFoundError(f"Product not found: {item.product_id}", code="PRODUCT_NOT_FOUND")

        pricing = calculate_order_pricing(
            ((products[item.product_id].price, item.quantity) for item in payload.items),
            payload.type,
            delivery_fee=tenant_settings.delivery_fee,
            tax_rate=tenant_settings.tax_rate,
            free_delivery_threshold=tenant_settings.free_delivery_threshold,
        )

        customer = await customer_crud.get_or_create_customer(
            db, tenant.id, payload.customer, update_existing=payload.update_customer_details
        )

        number = await tenant_crud.next_order_number(db, tenant.id)
        details = payload.customer
        order = Order(
            tenant_id=tenant.id,
            customer_id=customer.id,
            order_number=format_order_number(tenant.subdomain, number),
            status=OrderStatus.PENDING,
            type=payload.type,
            source=payload.source,
            subtotal=pricing.subtotal,
            delivery_fee=pricing.delivery_fee,
            tax=pricing.tax,
            total=pricing.total,
            customer_name=" ".join(p for p in (details.first_name, details.last_name) if p).strip(),
            customer_email=str(details.email).strip().lower(),
            customer_phone=details.phone.strip(),
            delivery_address=details.address,
            delivery_city=details.city,
            delivery_postal=details.postal_code,
            delivery_notes=payload.notes,
            payment_method=payload.payment_method,
            payment_status=PaymentStatus.PENDING,
            cash_amount=round_money(payload.cash_amount) if payload.cash_amount is not None else None,
            estimated_time=estimated_minutes(payload.type),
            scheduled_for=to_utc_naive(payload.scheduled_for) if payload.scheduled_for else None,
            created_at=utcnow(),
        )
        order.items = [
            OrderItem(
                product_id=item.product_id,
                name=products[item.product_id].name,
                price=products[item.product_id].price,
                quantity=item.quantity,
                notes=item.notes,
            )
            for item in payload.items
        ]
        db.add(order)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    log.info(
        "order created: tenant=%s order=%s number=%s total=%s type=%s",
        tenant.id, order.id, order.order_number, order.total, order.type.value,
    )

    if notifier is not None:
        try:
            await emit_new_order(notifier, order)
        except Exception:
            # Keep the order even if fan-out fails
            log.exception("new-order notification failed: tenant=%s order=%s", tenant.id, order.id)

    return await order_crud.get_order(db, tenant.id, order.id)


def check_transition(current: OrderStatus, new: OrderStatus) -> None:
    if settings.enforce_terminal_statuses and current in TERMINAL_STATUSES:
        raise InvalidStatusTransitionError(
            f"Order is already {current.value.lower()} and can no longer change status"
        )

    if settings.allow_status_jumps or new == current or new == OrderStatus.CANCELLED:
        return

    # Strict mode: one step forward along the canonical lifecycle
    if current in STATUS_FLOW and new in STATUS_FLOW:
        if STATUS_FLOW.index(new) == STATUS_FLOW.index(current) + 1:
            return
    raise InvalidStatusTransitionError(f"Cannot move order from {current.value} to {new.value}")


async def update_order_status(
    db: AsyncSession,
    tenant: TenantContext,
    order_id: str,
    update: OrderStatusUpdate,
    notifier: Optional[NotificationHub] = None,
) -> Order:
    # Orders of other tenants are indistinguishable from missing ones
    order = await order_crud.get_order(db, tenant.id, order_id)
    if not order:
        raise NotFoundError("Order not found", code="ORDER_NOT_FOUND")

    previous = order.status
    check_transition(previous, update.status)

    values = {"status": update.status, "status_changed_at": utcnow()}
    if update.estimated_time is not None:
        values["estimated_time"] = update.estimated_time
    if update.notes:
        values["notes"] = update.notes

    # The row was read without a lock; repeat the guards in the UPDATE itself
    stmt = sql_update(Order).where(Order.id == order_id, Order.tenant_id == tenant.id)
    if settings.enforce_terminal_statuses:
        stmt = stmt.where(Order.status.not_in(TERMINAL_STATUSES))
    if not settings.allow_status_jumps:
        stmt = stmt.where(Order.status == previous)
    result = await db.execute(stmt.values(**values).execution_options(synchronize_session=False))
    if result.rowcount == 0:
        await db.rollback()
        log.info("status update lost a race: tenant=%s order=%s", tenant.id, order_id)
        raise InvalidStatusTransitionError("Order status was changed by another update, reload and retry")
    await db.commit()
    order = await order_crud.get_order(db, tenant.id, order_id)

    log.info(
        "order status: tenant=%s order=%s number=%s %s -> %s",
        tenant.id, order.id, order.order_number, previous.value, order.status.value,
    )

    if notifier is not None:
        try:
            await emit_order_status(notifier, order, status_message(order.status))
        except Exception:
            log.exception("status notification failed: tenant=%s order=%s", tenant.id, order.id)

    return order


async def track_order(db: AsyncSession, tenant: TenantContext, order_number: str) -> Order:
    order = await order_crud.get_order_by_number(db, tenant.id, order_number)
    if not order:
        raise NotFoundError("Order not found", code="ORDER_NOT_FOUND")
    return order


def build_receipt(order: Order) -> OrderReceipt:
    return OrderReceipt(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        type=order.type,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        tax=order.tax,
        total=order.total,
        estimated_time=order.estimated_time,
        customer=ReceiptCustomer(
            name=order.customer_name,
            email=order.customer_email,
            phone=order.customer_phone,
        ),
        items=[OrderItemRead.model_validate(item) for item in order.items],
        payment_url=None if order.payment_method == PaymentMethod.CASH else f"/checkout/{order.id}",
    )
