from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
import logging

from app.core.config import settings as app_settings
from app.core.errors import ConflictError
from app.models.tenant import Tenant, TenantSettings, TenantStatus
from app.schemas.tenant import TenantCreate, TenantSettingsUpdate

log = logging.getLogger(__name__)


async def get_tenant(db: AsyncSession, tenant_id: str) -> Optional[Tenant]:
    result = await db.execute(
        select(Tenant)
        .where(Tenant.id == tenant_id)
        .options(selectinload(Tenant.settings))
    )
    return result.scalar_one_or_none()


async def get_tenant_by_subdomain(db: AsyncSession, subdomain: str) -> Optional[Tenant]:
    result = await db.execute(
        select(Tenant).where(Tenant.subdomain == subdomain.strip().lower())
    )
    return result.scalar_one_or_none()


async def list_tenants(db: AsyncSession, status: Optional[TenantStatus] = None):
    query = select(Tenant).options(selectinload(Tenant.settings))
    if status is not None:
        query = query.where(Tenant.status == status)
    result = await db.execute(query.order_by(Tenant.created_at.desc()))
    return result.scalars().all()


def _default_settings(tenant_id: str) -> TenantSettings:
    return TenantSettings(
        tenant_id=tenant_id,
        currency=app_settings.default_currency,
        timezone=app_settings.default_timezone,
        language=app_settings.default_language,
        delivery_fee=app_settings.default_delivery_fee,
        tax_rate=app_settings.default_tax_rate,
    )


def _apply_settings(row: TenantSettings, updates: TenantSettingsUpdate) -> None:
    for key, value in updates.model_dump(exclude_unset=True).items():
        setattr(row, key, value)


async def create_tenant(db: AsyncSession, payload: TenantCreate) -> Tenant:
    """Sign up a new restaurant. Starts in TRIAL with default settings."""
    subdomain = payload.subdomain.strip().lower()
    if await get_tenant_by_subdomain(db, subdomain):
        raise ConflictError(f"Subdomain '{subdomain}' is already taken", code="SUBDOMAIN_TAKEN")

    tenant = Tenant(
        name=payload.name.strip(),
        subdomain=subdomain,
        email=payload.email,
        phone=payload.phone,
        plan=payload.plan,
        status=TenantStatus.TRIAL,
        trial_ends_at=datetime.utcnow() + timedelta(days=app_settings.trial_period_days),
        last_order_number=0,
    )
    db.add(tenant)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Subdomain '{subdomain}' is already taken", code="SUBDOMAIN_TAKEN")

    tenant_settings = _default_settings(tenant.id)
    if payload.settings is not None:
        _apply_settings(tenant_settings, payload.settings)
    tenant.settings = tenant_settings

    await db.commit()
    log.info("tenant created: tenant=%s subdomain=%s plan=%s", tenant.id, subdomain, tenant.plan)
    return await get_tenant(db, tenant.id)


async def update_tenant_status(db: AsyncSession, tenant_id: str, status: TenantStatus) -> Optional[Tenant]:
    tenant = await get_tenant(db, tenant_id)
    if not tenant:
        return None
    previous = tenant.status
    tenant.status = status
    await db.commit()
    log.info("tenant status: tenant=%s %s -> %s", tenant_id, previous.value, status.value)
    return await get_tenant(db, tenant_id)


async def get_or_create_settings(db: AsyncSession, tenant_id: str) -> TenantSettings:
    result = await db.execute(select(TenantSettings).where(TenantSettings.tenant_id == tenant_id))
    row = result.scalar_one_or_none()
    if row is None:
        row = _default_settings(tenant_id)
        db.add(row)
        await db.flush()
    return row


async def update_settings(db: AsyncSession, tenant_id: str, updates: TenantSettingsUpdate) -> TenantSettings:
    row = await get_or_create_settings(db, tenant_id)
    _apply_settings(row, updates)
    await db.commit()
    await db.refresh(row)
    return row


async def next_order_number(db: AsyncSession, tenant_id: str) -> int:
    """Atomically bump and return the tenant's order counter.

    Runs inside the caller's transaction: the increment only becomes visible
    when the order that uses it commits, and a rollback gives it back.
    """
    stmt = (
        update(Tenant)
        .where(Tenant.id == tenant_id)
        .values(last_order_number=Tenant.last_order_number + 1)
        .returning(Tenant.last_order_number)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.scalar_one()
