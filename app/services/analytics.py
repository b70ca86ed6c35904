"""On-demand analytics over the order table.

Every figure is computed by scanning the relevant orders; there is no
materialized aggregate, which is fine while per-tenant volume stays small.
Cancelled orders never count towards order counts or revenue.

The pure ``*_from_orders`` functions take the orders and a reference ``now``
so they can be tested without a clock or a database.
"""
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud import order as order_crud
from app.crud import tenant as tenant_crud
from app.models.customer.order import Order, OrderStatus
from app.models.tenant import TenantStatus
from app.services.pricing import round_money
from app.utils.timezones import UTC, get_zone, local_midnight, month_start, previous_month_start, to_local

log = logging.getLogger(__name__)

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
TOP_PRODUCTS = 5
RECENT_ORDERS = 5
ZERO = Decimal("0.00")


class SalesPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class PlatformPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"


def _counted(orders: Iterable[Order]) -> List[Order]:
    return [o for o in orders if o.status != OrderStatus.CANCELLED]


def _revenue(orders: Iterable[Order]) -> Decimal:
    return sum((o.total for o in orders), ZERO)


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(UTC)
    return now if now.tzinfo else now.replace(tzinfo=UTC)


# -----------------------
# Time series
# -----------------------

def _orders_by_local_day(orders: List[Order], tz) -> Dict[date, List[Order]]:
    by_day = defaultdict(list)
    for o in orders:
        by_day[to_local(o.created_at, tz).date()].append(o)
    return by_day


def hourly_groups(orders: List[Order], tz, now: datetime) -> List[Tuple[str, List[Order]]]:
    """Today's orders per opening hour, labelled "9:00", "10:00", ..."""
    today = now.astimezone(tz).date()
    by_hour = defaultdict(list)
    for o in orders:
        local = to_local(o.created_at, tz)
        if local.date() == today:
            by_hour[local.hour].append(o)
    return [
        (f"{hour}:00", by_hour[hour])
        for hour in range(settings.analytics_first_hour, settings.analytics_last_hour + 1)
    ]


def daily_groups(orders: List[Order], tz, now: datetime, days: int = 7) -> List[Tuple[str, List[Order]]]:
    """One bucket per calendar day, oldest first, ending today."""
    today = now.astimezone(tz).date()
    by_day = _orders_by_local_day(orders, tz)
    groups = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        groups.append((WEEKDAY_LABELS[day.weekday()], by_day.get(day, [])))
    return groups


def weekly_groups(orders: List[Order], tz, now: datetime, weeks: int = 4) -> List[Tuple[str, List[Order]]]:
    """Rolling 7-day buckets, oldest first; the last one ends today."""
    today = now.astimezone(tz).date()
    by_day = _orders_by_local_day(orders, tz)
    groups = []
    for index, back in enumerate(range(weeks - 1, -1, -1), start=1):
        end = today - timedelta(days=back * 7)
        start = end - timedelta(days=6)
        bucket = [o for day, day_orders in by_day.items() if start <= day <= end for o in day_orders]
        groups.append((f"Week {index}", bucket))
    return groups


def monthly_groups(orders: List[Order], tz, now: datetime, months: int = 3) -> List[Tuple[str, List[Order]]]:
    """Calendar-month buckets labelled "2024-05", ending with the current month."""
    local_now = now.astimezone(tz)
    keys = []
    year, month = local_now.year, local_now.month
    for _ in range(months):
        keys.append((year, month))
        year, month = (year - 1, 12) if month == 1 else (year, month - 1)
    keys.reverse()

    by_month = defaultdict(list)
    for o in orders:
        local = to_local(o.created_at, tz)
        by_month[(local.year, local.month)].append(o)
    return [(f"{y}-{m:02d}", by_month[(y, m)]) for y, m in keys]


def _points(groups, label_key: str) -> List[Dict]:
    return [
        {label_key: label, "orders": len(bucket), "revenue": _revenue(bucket)}
        for label, bucket in groups
    ]


# -----------------------
# Restaurant analytics
# -----------------------

def top_products_from_orders(orders: Iterable[Order], limit: int = TOP_PRODUCTS) -> List[Dict]:
    stats: Dict[str, Dict] = {}
    for o in orders:
        for item in o.items:
            row = stats.setdefault(item.name, {"name": item.name, "count": 0, "revenue": ZERO})
            row["count"] += item.quantity
            row["revenue"] += item.price * item.quantity
    return sorted(stats.values(), key=lambda r: r["revenue"], reverse=True)[:limit]


def restaurant_analytics_from_orders(orders: Iterable[Order], tz, now: Optional[datetime] = None) -> Dict:
    now = _now(now)
    orders = list(orders)
    counted = _counted(orders)
    local_now = now.astimezone(tz)

    def since(start: datetime) -> List[Order]:
        return [o for o in counted if to_local(o.created_at, tz) >= start]

    today_orders = since(local_midnight(local_now.date(), tz))
    week_orders = since(now - timedelta(days=7))
    month_orders = since(month_start(local_now.date(), tz))

    avg_order_value = round_money(_revenue(counted) / len(counted)) if counted else ZERO
    recent = sorted(orders, key=lambda o: o.created_at, reverse=True)[:RECENT_ORDERS]

    return {
        "today_orders": len(today_orders),
        "today_revenue": _revenue(today_orders),
        "week_orders": len(week_orders),
        "week_revenue": _revenue(week_orders),
        "month_orders": len(month_orders),
        "month_revenue": _revenue(month_orders),
        "avg_order_value": avg_order_value,
        "top_products": top_products_from_orders(counted),
        "hourly_stats": _points(hourly_groups(counted, tz, now), "hour"),
        "recent_orders": [
            {
                "id": o.id,
                "order_number": o.order_number,
                "status": o.status.value,
                "type": o.type.value,
                "total": o.total,
                "customer_name": o.customer_name,
                "created_at": o.created_at,
            }
            for o in recent
        ],
    }


def sales_series_from_orders(orders: Iterable[Order], period: SalesPeriod, tz, now: Optional[datetime] = None) -> List[Dict]:
    now = _now(now)
    counted = _counted(orders)
    if period == SalesPeriod.TODAY:
        groups = hourly_groups(counted, tz, now)
    elif period == SalesPeriod.WEEK:
        groups = daily_groups(counted, tz, now)
    else:
        groups = weekly_groups(counted, tz, now)
    return _points(groups, "time")


async def _tenant_zone(db: AsyncSession, tenant_id: str):
    tenant_settings = await tenant_crud.get_or_create_settings(db, tenant_id)
    return get_zone(tenant_settings.timezone)


async def get_restaurant_analytics(db: AsyncSession, tenant_id: str, now: Optional[datetime] = None) -> Dict:
    tz = await _tenant_zone(db, tenant_id)
    orders = await order_crud.get_orders_since(db, tenant_id)
    log.info("restaurant analytics: tenant=%s scanned=%s", tenant_id, len(orders))
    return restaurant_analytics_from_orders(orders, tz, now)


async def get_sales_data(db: AsyncSession, tenant_id: str, period: SalesPeriod, now: Optional[datetime] = None) -> List[Dict]:
    tz = await _tenant_zone(db, tenant_id)
    # four weeks plus a day of slack for the timezone offset
    since = (_now(now) - timedelta(days=29)).astimezone(UTC).replace(tzinfo=None)
    orders = await order_crud.get_orders_since(db, tenant_id, since)
    return sales_series_from_orders(orders, period, tz, now)


# -----------------------
# Platform analytics
# -----------------------

def _percent(numerator, denominator) -> Optional[float]:
    if not denominator:
        return None
    return round(float(numerator) / float(denominator) * 100, 1)


def platform_analytics_from_orders(tenants, orders: Iterable[Order], now: Optional[datetime] = None) -> Dict:
    """Aggregate across every tenant, month boundaries in UTC."""
    now = _now(now)
    counted = _counted(orders)

    status_counts = {s: 0 for s in TenantStatus}
    for t in tenants:
        status_counts[t.status] += 1
    total_tenants = len(tenants)

    this_month = month_start(now.date(), UTC)
    last_month = previous_month_start(now.date(), UTC)
    monthly = [o for o in counted if to_local(o.created_at, UTC) >= this_month]
    previous = [o for o in counted if last_month <= to_local(o.created_at, UTC) < this_month]

    monthly_revenue = _revenue(monthly)
    previous_revenue = _revenue(previous)
    earning_tenants = {o.tenant_id for o in monthly}

    growth_rate = None
    if previous_revenue > 0:
        growth_rate = _percent(monthly_revenue - previous_revenue, previous_revenue)

    return {
        "total_tenants": total_tenants,
        "active_tenants": status_counts[TenantStatus.ACTIVE],
        "trial_tenants": status_counts[TenantStatus.TRIAL],
        "suspended_tenants": status_counts[TenantStatus.SUSPENDED],
        "cancelled_tenants": status_counts[TenantStatus.CANCELLED],
        "total_revenue": _revenue(counted),
        "monthly_revenue": monthly_revenue,
        "total_orders": len(counted),
        "monthly_orders": len(monthly),
        "avg_revenue_per_tenant": round_money(monthly_revenue / len(earning_tenants)) if earning_tenants else ZERO,
        "growth_rate": growth_rate,
        "churn_rate": _percent(status_counts[TenantStatus.CANCELLED], total_tenants) or 0.0,
    }


def platform_sales_from_orders(orders: Iterable[Order], period: PlatformPeriod, now: Optional[datetime] = None) -> List[Dict]:
    now = _now(now)
    counted = _counted(orders)
    if period == PlatformPeriod.WEEK:
        groups = daily_groups(counted, UTC, now)
    elif period == PlatformPeriod.MONTH:
        groups = weekly_groups(counted, UTC, now)
    else:
        groups = monthly_groups(counted, UTC, now)

    points = _points(groups, "period")
    for point, (_, bucket) in zip(points, groups):
        point["tenants"] = len({o.tenant_id for o in bucket})
    return points


async def get_platform_analytics(db: AsyncSession, now: Optional[datetime] = None) -> Dict:
    tenants = await tenant_crud.list_tenants(db)
    orders = await order_crud.get_platform_orders_since(db)
    log.info("platform analytics: tenants=%s scanned=%s", len(tenants), len(orders))
    return platform_analytics_from_orders(tenants, orders, now)


async def get_platform_sales_data(db: AsyncSession, period: PlatformPeriod, now: Optional[datetime] = None) -> List[Dict]:
    # the quarter view is the widest: three calendar months
    since = (_now(now) - timedelta(days=93)).astimezone(UTC).replace(tzinfo=None)
    orders = await order_crud.get_platform_orders_since(db, since)
    return platform_sales_from_orders(orders, period, now)
