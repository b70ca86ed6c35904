"""Price computation: Decimal arithmetic, half-up rounding, delivery fee rules."""

from decimal import Decimal

from app.models.customer.order import OrderType
from app.services.pricing import calculate_order_pricing, compute_delivery_fee, round_money


def test_pickup_order_has_no_delivery_fee():
    pricing = calculate_order_pricing([(Decimal("12.50"), 2)], OrderType.PICKUP, Decimal("2.50"), Decimal("0.21"))

    assert pricing.subtotal == Decimal("25.00")
    assert pricing.delivery_fee == Decimal("0.00")
    assert pricing.tax == Decimal("5.25")
    assert pricing.total == Decimal("30.25")


def test_delivery_tax_includes_fee_and_rounds_half_up():
    pricing = calculate_order_pricing([(Decimal("12.50"), 2)], OrderType.DELIVERY, Decimal("2.50"), Decimal("0.21"))

    assert pricing.subtotal == Decimal("25.00")
    assert pricing.delivery_fee == Decimal("2.50")
    # 27.50 * 0.21 = 5.775
    assert pricing.tax == Decimal("5.78")
    assert pricing.total == Decimal("33.28")


def test_total_is_exact_sum_of_parts():
    lines = [(Decimal("2.50"), 3), (Decimal("18.50"), 1), (Decimal("3.33"), 7)]
    for order_type in OrderType:
        p = calculate_order_pricing(lines, order_type, Decimal("2.50"), Decimal("0.09"))
        assert p.total == p.subtotal + p.delivery_fee + p.tax
        assert p.tax == round_money((p.subtotal + p.delivery_fee) * Decimal("0.09"))


def test_free_delivery_threshold():
    assert compute_delivery_fee(OrderType.DELIVERY, Decimal("20.00"), Decimal("2.50"), Decimal("20.00")) == Decimal("0.00")
    assert compute_delivery_fee(OrderType.DELIVERY, Decimal("19.99"), Decimal("2.50"), Decimal("20.00")) == Decimal("2.50")
    assert compute_delivery_fee(OrderType.DINE_IN, Decimal("5.00"), Decimal("2.50")) == Decimal("0.00")


def test_float_inputs_do_not_leak_binary_noise():
    pricing = calculate_order_pricing([(0.1, 3)], OrderType.PICKUP, 2.5, 0.21)
    assert pricing.subtotal == Decimal("0.30")
    assert pricing.tax == Decimal("0.06")
