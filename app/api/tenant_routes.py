from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_staff, require_superadmin
from app.core.errors import NotFoundError
from app.core.responses import success_response
from app.crud import tenant as tenant_crud
from app.db import get_db
from app.models.tenant import TenantStatus
from app.models.user import User, UserRole
from app.schemas.tenant import (
    TenantCreate,
    TenantRead,
    TenantSettingsRead,
    TenantSettingsUpdate,
    TenantStatusUpdate,
)
from app.utils.tenant import TenantContext, get_current_tenant

router = APIRouter()


# -----------------------
# Current tenant settings
# -----------------------
# Declared before /{tenant_id} so "current" is never taken for an id.

@router.get("/current/settings")
async def get_current_settings(
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff()),
):
    row = await tenant_crud.get_or_create_settings(db, tenant.id)
    await db.commit()
    return success_response(TenantSettingsRead.model_validate(row))


@router.patch("/current/settings")
async def update_current_settings(
    updates: TenantSettingsUpdate,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff(UserRole.OWNER)),
):
    row = await tenant_crud.update_settings(db, tenant.id, updates)
    return success_response(TenantSettingsRead.model_validate(row), message="Settings updated")


# -----------------------
# Super-admin
# -----------------------

@router.post("", status_code=201)
async def create_tenant(
    payload: TenantCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_superadmin),
):
    tenant = await tenant_crud.create_tenant(db, payload)
    return success_response(TenantRead.model_validate(tenant), message="Restaurant created")


@router.get("")
async def list_tenants(
    status: Optional[TenantStatus] = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_superadmin),
):
    tenants = await tenant_crud.list_tenants(db, status=status)
    return success_response([TenantRead.model_validate(t) for t in tenants])


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_superadmin),
):
    tenant = await tenant_crud.get_tenant(db, tenant_id)
    if not tenant:
        raise NotFoundError("Restaurant not found", code="TENANT_NOT_FOUND")
    return success_response(TenantRead.model_validate(tenant))


@router.patch("/{tenant_id}/status")
async def update_tenant_status(
    tenant_id: str,
    update: TenantStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_superadmin),
):
    tenant = await tenant_crud.update_tenant_status(db, tenant_id, update.status)
    if not tenant:
        raise NotFoundError("Restaurant not found", code="TENANT_NOT_FOUND")
    return success_response(TenantRead.model_validate(tenant), message="Restaurant status updated")
