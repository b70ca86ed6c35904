from typing import Optional, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.core.config import settings

TENANT_HEADER = "x-tenant"


def subdomain_from_host(host: Optional[str], base_domains: Sequence[str]) -> Optional[str]:
    """'pizzamario.localhost:3000' -> 'pizzamario' when 'localhost' is a base domain."""
    if not host:
        return None
    hostname = host.split(":", 1)[0].strip().lower().rstrip(".")
    for base in base_domains:
        suffix = "." + base
        if hostname.endswith(suffix) and len(hostname) > len(suffix):
            return hostname[: -len(suffix)].split(".")[0] or None
    return None


def extract_tenant_identifier(
    header_value: Optional[str],
    host: Optional[str],
    base_domains: Sequence[str],
    default: Optional[str] = None,
) -> Optional[str]:
    """Header first, then host subdomain, then the configured default."""
    if header_value and header_value.strip():
        return header_value.strip().lower()
    from_host = subdomain_from_host(host, base_domains)
    if from_host:
        return from_host
    if default and default.strip():
        return default.strip().lower()
    return None


def identifier_for_request(request: Request) -> Optional[str]:
    return extract_tenant_identifier(
        request.headers.get(TENANT_HEADER),
        request.headers.get("host"),
        settings.base_domains,
        settings.default_tenant,
    )


class TenantMiddleware(BaseHTTPMiddleware):
    """Puts the tenant identifier on request.state. The DB lookup happens in
    app.utils.tenant.get_current_tenant, only for routes that need a tenant."""

    async def dispatch(self, request: Request, call_next):
        request.state.tenant_identifier = identifier_for_request(request)
        return await call_next(request)
