from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user, require_staff, require_superadmin
from app.core.errors import AuthorizationError
from app.core.responses import success_response
from app.db import get_db
from app.models.user import User, UserRole
from app.services import analytics
from app.services.analytics import PlatformPeriod, SalesPeriod
from app.utils.tenant import TenantContext, get_current_tenant, resolve_tenant

router = APIRouter()

analytics_viewer = require_staff(UserRole.OWNER, UserRole.MANAGER)


# -----------------------
# Restaurant
# -----------------------

@router.get("/restaurant")
async def restaurant_analytics(
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(analytics_viewer),
):
    return success_response(await analytics.get_restaurant_analytics(db, tenant.id))


@router.get("/restaurant/{tenant_ref}")
async def restaurant_analytics_for(
    tenant_ref: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Explicit tenant (subdomain or id), for the super-admin console."""
    tenant = await resolve_tenant(db, tenant_ref, allow_inactive=True)
    if user.role != UserRole.SUPERADMIN:
        if user.tenant_id != tenant.id:
            raise AuthorizationError("Access denied to this restaurant")
        if user.role not in (UserRole.OWNER, UserRole.MANAGER):
            raise AuthorizationError("Insufficient permissions")
    return success_response(await analytics.get_restaurant_analytics(db, tenant.id))


@router.get("/sales/{period}")
async def sales_data(
    period: SalesPeriod,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(analytics_viewer),
):
    return success_response(await analytics.get_sales_data(db, tenant.id, period))


# -----------------------
# Platform
# -----------------------

@router.get("/platform")
async def platform_analytics(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_superadmin),
):
    return success_response(await analytics.get_platform_analytics(db))


@router.get("/platform/sales/{period}")
async def platform_sales_data(
    period: PlatformPeriod,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_superadmin),
):
    return success_response(await analytics.get_platform_sales_data(db, period))
