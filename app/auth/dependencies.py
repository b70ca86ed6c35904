# auth/dependencies.py
import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.auth.config import auth_config
from app.core.errors import AuthenticationError, AuthorizationError
from app.db import get_db
from app.models.user import User, UserRole
from app.utils.tenant import TenantContext, get_current_tenant

log = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            auth_config.secret,
            algorithms=[auth_config.algorithm],
            audience=auth_config.audience,
            leeway=auth_config.leeway_seconds,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired", code="TOKEN_EXPIRED")
    except jwt.InvalidTokenError as e:
        log.info("rejected bearer token: %s", e)
        raise AuthenticationError("Invalid token", code="INVALID_TOKEN")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided", code="NO_TOKEN")

    claims = decode_token(credentials.credentials)

    result = await db.execute(select(User).where(User.id == str(claims["sub"])))
    user = result.scalar_one_or_none()
    if not user:
        raise AuthenticationError("User not found", code="USER_NOT_FOUND")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated", code="ACCOUNT_DEACTIVATED")
    return user


def require_staff(*roles: UserRole):
    """Staff of the resolved tenant holding one of ``roles`` (any role if none given).

    Super-admins pass regardless of tenant or role.
    """
    async def dependency(
        user: User = Depends(get_current_user),
        tenant: TenantContext = Depends(get_current_tenant),
    ) -> User:
        if user.role == UserRole.SUPERADMIN:
            return user
        if user.tenant_id != tenant.id:
            log.warning("cross-tenant access denied: user=%s tenant=%s", user.id, tenant.subdomain)
            raise AuthorizationError("Access denied to this restaurant")
        if roles and user.role not in roles:
            raise AuthorizationError("Insufficient permissions")
        return user

    return dependency


async def require_superadmin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.SUPERADMIN:
        raise AuthorizationError("Super-admin access only")
    return user
