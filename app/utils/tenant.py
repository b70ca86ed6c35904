# app/utils/tenant.py
from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import TenantInactiveError, TenantNotFoundError
from app.crud import tenant as tenant_crud
from app.db import get_db
from app.middleware.tenant_middleware import identifier_for_request
from app.models.tenant import Tenant, TenantStatus, SERVING_STATUSES

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    id: str
    name: str
    subdomain: str
    status: TenantStatus

    @classmethod
    def from_model(cls, tenant: Tenant) -> "TenantContext":
        return cls(id=tenant.id, name=tenant.name, subdomain=tenant.subdomain, status=tenant.status)


async def resolve_tenant(db: AsyncSession, identifier: Optional[str], allow_inactive: bool = False) -> TenantContext:
    """Subdomain first, then primary key. Only ACTIVE and TRIAL tenants serve requests."""
    if not identifier:
        raise TenantNotFoundError()

    tenant = await tenant_crud.get_tenant_by_subdomain(db, identifier)
    if not tenant:
        tenant = await tenant_crud.get_tenant(db, identifier)
    if not tenant:
        log.info("tenant not found: identifier=%s", identifier)
        raise TenantNotFoundError()

    if not allow_inactive and tenant.status not in SERVING_STATUSES:
        log.warning("tenant inactive: tenant=%s status=%s", tenant.id, tenant.status.value)
        raise TenantInactiveError()

    return TenantContext.from_model(tenant)


async def get_current_tenant(request: Request, db: AsyncSession = Depends(get_db)) -> TenantContext:
    if hasattr(request.state, "tenant_identifier"):
        identifier = request.state.tenant_identifier
    else:
        identifier = identifier_for_request(request)

    tenant = await resolve_tenant(db, identifier)
    request.state.tenant = tenant
    return tenant
