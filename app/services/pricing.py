"""Order price computation.

All arithmetic is Decimal. The subtotal is rounded once, after summing the
lines; tax is rounded once, on subtotal plus delivery fee. Halves round up,
so 27.50 x 0.21 = 5.775 becomes 5.78.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

from app.models.customer.order import OrderType

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 12.5 do not drag binary noise along
    return Decimal(str(value))


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    total: Decimal


def compute_delivery_fee(
    order_type: OrderType,
    subtotal: Decimal,
    delivery_fee,
    free_delivery_threshold=None,
) -> Decimal:
    if order_type != OrderType.DELIVERY:
        return ZERO
    if free_delivery_threshold is not None and subtotal >= to_decimal(free_delivery_threshold):
        return ZERO
    return round_money(delivery_fee)


def calculate_order_pricing(
    lines: Iterable[Tuple[Decimal, int]],
    order_type: OrderType,
    delivery_fee,
    tax_rate,
    free_delivery_threshold: Optional[Decimal] = None,
) -> PriceBreakdown:
    """``lines`` are (unit_price, quantity) pairs."""
    raw_subtotal = sum((to_decimal(price) * quantity for price, quantity in lines), Decimal("0"))
    subtotal = round_money(raw_subtotal)
    fee = compute_delivery_fee(order_type, subtotal, delivery_fee, free_delivery_threshold)
    tax = round_money((subtotal + fee) * to_decimal(tax_rate))
    return PriceBreakdown(
        subtotal=subtotal,
        delivery_fee=fee,
        tax=tax,
        total=subtotal + fee + tax,
    )
