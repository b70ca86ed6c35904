"""Analytics aggregation with a fixed clock, plus the HTTP surface and its guards."""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from app.models.customer.order import Order, OrderItem, OrderStatus, OrderType
from app.models.tenant import TenantStatus
from app.services.analytics import (
    PlatformPeriod,
    SalesPeriod,
    platform_analytics_from_orders,
    platform_sales_from_orders,
    restaurant_analytics_from_orders,
    sales_series_from_orders,
)
from tests.conftest import auth_headers, order_payload

UTC = timezone.utc
# Wednesday
NOW = datetime(2024, 5, 15, 16, 0, tzinfo=UTC)


def make_order(created_at, total, status=OrderStatus.PENDING, tenant_id="t1", item="Margherita", quantity=1):
    total = Decimal(total)
    order = Order(
        id=f"o-{created_at.isoformat()}-{total}",
        tenant_id=tenant_id,
        order_number="PIZZAMARIO-0001",
        status=status,
        type=OrderType.PICKUP,
        total=total,
        customer_name="Jan",
        created_at=created_at,
    )
    order.items = [OrderItem(name=item, price=total / quantity, quantity=quantity)]
    return order


def at(day, hour, minute=0):
    # stored timestamps are naive UTC
    return datetime(2024, 5, day, hour, minute)


def _bucket(series, label, key="time"):
    return next(p for p in series if p[key] == label)


def test_hourly_buckets_today():
    orders = [make_order(at(15, 9, 15), "10"), make_order(at(15, 9, 50), "20"), make_order(at(15, 14), "30")]

    series = sales_series_from_orders(orders, SalesPeriod.TODAY, UTC, NOW)

    assert [p["time"] for p in series] == [f"{h}:00" for h in range(9, 23)]
    assert _bucket(series, "9:00") == {"time": "9:00", "orders": 2, "revenue": Decimal("30")}
    assert _bucket(series, "14:00")["revenue"] == Decimal("30")
    assert sum(p["revenue"] for p in series) == Decimal("60")


def test_cancelled_orders_never_count():
    orders = [make_order(at(15, 10), "10"), make_order(at(15, 11), "99", status=OrderStatus.CANCELLED)]

    summary = restaurant_analytics_from_orders(orders, UTC, NOW)

    assert summary["today_orders"] == 1
    assert summary["today_revenue"] == Decimal("10")
    assert summary["avg_order_value"] == Decimal("10.00")
    assert [p["name"] for p in summary["top_products"]] == ["Margherita"]
    # still listed among recent orders
    assert len(summary["recent_orders"]) == 2


def test_restaurant_windows_and_rankings():
    orders = [
        make_order(at(15, 12), "20", item="Margherita", quantity=2),
        make_order(at(12, 12), "15", item="Pepperoni"),
        make_order(at(2, 12), "40", item="Quattro Stagioni"),
        make_order(datetime(2024, 4, 30, 12), "5", item="Water"),
    ]

    summary = restaurant_analytics_from_orders(orders, UTC, NOW)

    assert (summary["today_orders"], summary["today_revenue"]) == (1, Decimal("20"))
    assert (summary["week_orders"], summary["week_revenue"]) == (2, Decimal("35"))
    assert (summary["month_orders"], summary["month_revenue"]) == (3, Decimal("75"))
    assert summary["avg_order_value"] == Decimal("20.00")
    assert [p["name"] for p in summary["top_products"]] == ["Quattro Stagioni", "Margherita", "Pepperoni", "Water"]
    assert summary["top_products"][1]["count"] == 2
    assert summary["recent_orders"][0]["total"] == Decimal("20")
    assert len(summary["hourly_stats"]) == 14


def test_local_day_follows_tenant_timezone():
    amsterdam = ZoneInfo("Europe/Amsterdam")
    # 07:30 UTC is 09:30 in Amsterdam (CEST)
    orders = [make_order(at(15, 7, 30), "12.50")]

    series = sales_series_from_orders(orders, SalesPeriod.TODAY, amsterdam, NOW)

    assert _bucket(series, "9:00")["orders"] == 1
    assert sum(p["orders"] for p in series) == 1


def test_week_series_has_weekday_labels_ending_today():
    orders = [make_order(at(15, 12), "10"), make_order(at(9, 12), "5"), make_order(at(8, 12), "100")]

    series = sales_series_from_orders(orders, SalesPeriod.WEEK, UTC, NOW)

    assert [p["time"] for p in series] == ["Thu", "Fri", "Sat", "Sun", "Mon", "Tue", "Wed"]
    assert series[-1]["revenue"] == Decimal("10")
    assert series[0]["revenue"] == Decimal("5")
    assert sum(p["orders"] for p in series) == 2


def test_month_series_is_four_weeks_ending_today():
    orders = [
        make_order(at(15, 12), "10"),
        make_order(at(9, 12), "20"),
        make_order(at(8, 12), "30"),
        make_order(datetime(2024, 4, 18, 12), "40"),
        make_order(datetime(2024, 4, 17, 12), "999"),
    ]

    series = sales_series_from_orders(orders, SalesPeriod.MONTH, UTC, NOW)

    assert [p["time"] for p in series] == ["Week 1", "Week 2", "Week 3", "Week 4"]
    assert [p["revenue"] for p in series] == [Decimal("40"), Decimal("0.00"), Decimal("30"), Decimal("30")]


def test_platform_summary_growth_and_churn():
    tenants = [SimpleNamespace(status=s) for s in (
        TenantStatus.ACTIVE, TenantStatus.ACTIVE, TenantStatus.TRIAL, TenantStatus.CANCELLED,
    )]
    orders = [
        make_order(at(3, 12), "100", tenant_id="t1"),
        make_order(at(4, 12), "50", tenant_id="t2"),
        make_order(datetime(2024, 4, 10, 12), "100", tenant_id="t1"),
        make_order(at(5, 12), "70", tenant_id="t1", status=OrderStatus.CANCELLED),
    ]

    summary = platform_analytics_from_orders(tenants, orders, NOW)

    assert summary["total_tenants"] == 4
    assert summary["active_tenants"] == 2
    assert summary["trial_tenants"] == 1
    assert summary["cancelled_tenants"] == 1
    assert summary["monthly_revenue"] == Decimal("150")
    assert summary["total_revenue"] == Decimal("250")
    assert summary["monthly_orders"] == 2
    assert summary["avg_revenue_per_tenant"] == Decimal("75.00")
    assert summary["growth_rate"] == 50.0
    assert summary["churn_rate"] == 25.0


def test_platform_growth_is_null_without_baseline():
    summary = platform_analytics_from_orders([], [make_order(at(3, 12), "10")], NOW)
    assert summary["growth_rate"] is None
    assert summary["churn_rate"] == 0.0


def test_platform_quarter_series_counts_distinct_tenants():
    orders = [
        make_order(at(3, 12), "10", tenant_id="t1"),
        make_order(at(4, 12), "10", tenant_id="t1"),
        make_order(at(5, 12), "10", tenant_id="t2"),
        make_order(datetime(2024, 3, 20, 12), "5", tenant_id="t3"),
    ]

    series = platform_sales_from_orders(orders, PlatformPeriod.QUARTER, NOW)

    assert [p["period"] for p in series] == ["2024-03", "2024-04", "2024-05"]
    assert series[0] == {"period": "2024-03", "orders": 1, "revenue": Decimal("5"), "tenants": 1}
    assert series[1]["orders"] == 0
    assert series[2]["tenants"] == 2
    assert series[2]["revenue"] == Decimal("30")


# -----------------------
# HTTP
# -----------------------

async def test_restaurant_analytics_endpoint(client, margherita, owner_headers):
    await client.post("/orders", json=order_payload(margherita.id), headers={"X-Tenant": "pizzamario"})

    resp = await client.get("/analytics/restaurant", headers=owner_headers)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["month_orders"] == 1
    assert data["month_revenue"] == 30.25
    assert data["top_products"][0]["name"] == "Margherita"
    assert data["recent_orders"][0]["order_number"] == "PIZZAMARIO-0001"


async def test_sales_endpoint_rejects_unknown_period(client, tenant, owner_headers):
    assert (await client.get("/analytics/sales/week", headers=owner_headers)).status_code == 200
    assert (await client.get("/analytics/sales/year", headers=owner_headers)).status_code == 400


async def test_employees_cannot_read_analytics(client, tenant, employee_headers):
    resp = await client.get("/analytics/restaurant", headers=employee_headers)
    assert resp.status_code == 403


async def test_explicit_tenant_analytics(client, db, tenant, other_tenant, owner, superadmin_headers):
    resp = await client.get("/analytics/restaurant/pizzamario", headers=superadmin_headers)
    assert resp.status_code == 200

    resp = await client.get("/analytics/restaurant/pizzamario", headers=auth_headers(owner))
    assert resp.status_code == 200

    resp = await client.get("/analytics/restaurant/sushibar", headers=auth_headers(owner))
    assert resp.status_code == 403


async def test_platform_endpoints_are_superadmin_only(client, tenant, owner_headers, superadmin_headers):
    assert (await client.get("/analytics/platform", headers=owner_headers)).status_code == 403

    resp = await client.get("/analytics/platform", headers=superadmin_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["total_tenants"] == 1

    resp = await client.get("/analytics/platform/sales/quarter", headers=superadmin_headers)
    assert resp.status_code == 200
    assert len(resp.json()["data"]) == 3
