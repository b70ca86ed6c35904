"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

import app.models  # registers every table on Base.metadata
from app.auth.config import auth_config
from app.db import get_db
from app.main import app as fastapi_app
from app.models.base import Base
from app.models.menu.category import Category
from app.models.menu.product import Product
from app.models.tenant import Tenant, TenantSettings, TenantStatus
from app.models.user import User, UserRole
from app.services.notifications import hub
from app.utils.tenant import TenantContext


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite so concurrent sessions really contend for the database."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """HTTP client against the app, one fresh session per request."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clean_hub():
    hub.reset()
    yield
    hub.reset()


# -----------------------
# Tenants and catalog
# -----------------------

async def make_tenant(db, subdomain, status=TenantStatus.ACTIVE, tz="Europe/Amsterdam", **settings_overrides):
    tenant = Tenant(
        name=subdomain.title(),
        subdomain=subdomain,
        email=f"owner@{subdomain}.nl",
        status=status,
        last_order_number=0,
    )
    tenant.settings = TenantSettings(
        currency="EUR",
        timezone=tz,
        language="nl",
        delivery_fee=Decimal("2.50"),
        tax_rate=Decimal("0.21"),
        **settings_overrides,
    )
    db.add(tenant)
    await db.commit()
    return tenant


async def make_product(db, tenant, name="Margherita", price="12.50", category=None, **fields):
    if category is None:
        category = Category(tenant_id=tenant.id, name="Pizza's", slug=f"pizzas-{name.lower()}")
        db.add(category)
        await db.flush()
    product = Product(
        tenant_id=tenant.id,
        category_id=category.id,
        name=name,
        price=Decimal(price),
        **fields,
    )
    db.add(product)
    await db.commit()
    return product


@pytest.fixture
async def tenant(db):
    return await make_tenant(db, "pizzamario")


@pytest.fixture
def tenant_ctx(tenant):
    return TenantContext.from_model(tenant)


@pytest.fixture
async def other_tenant(db):
    return await make_tenant(db, "sushibar")


@pytest.fixture
async def category(db, tenant):
    category = Category(tenant_id=tenant.id, name="Pizza's", slug="pizzas", sort_order=1)
    db.add(category)
    await db.commit()
    return category


@pytest.fixture
async def margherita(db, tenant, category):
    return await make_product(db, tenant, "Margherita", "12.50", category=category, is_popular=True)


# -----------------------
# Staff and tokens
# -----------------------

async def make_user(db, email, role, tenant=None, is_active=True):
    user = User(
        email=email,
        first_name=email.split("@")[0].title(),
        role=role,
        is_active=is_active,
        tenant_id=tenant.id if tenant else None,
    )
    db.add(user)
    await db.commit()
    return user


def token_for(user, **overrides):
    claims = {
        "sub": user.id,
        "aud": auth_config.audience,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    claims.update(overrides)
    return jwt.encode(claims, auth_config.secret, algorithm=auth_config.algorithm)


def auth_headers(user, subdomain=None, **claims):
    headers = {"Authorization": f"Bearer {token_for(user, **claims)}"}
    if subdomain:
        headers["X-Tenant"] = subdomain
    return headers


@pytest.fixture
async def owner(db, tenant):
    return await make_user(db, "owner@pizzamario.nl", UserRole.OWNER, tenant)


@pytest.fixture
async def manager(db, tenant):
    return await make_user(db, "manager@pizzamario.nl", UserRole.MANAGER, tenant)


@pytest.fixture
async def employee(db, tenant):
    return await make_user(db, "kassier@pizzamario.nl", UserRole.EMPLOYEE, tenant)


@pytest.fixture
async def superadmin(db):
    return await make_user(db, "admin@fooddupe.nl", UserRole.SUPERADMIN)


@pytest.fixture
def owner_headers(owner):
    return auth_headers(owner, "pizzamario")


@pytest.fixture
def employee_headers(employee):
    return auth_headers(employee, "pizzamario")


@pytest.fixture
def superadmin_headers(superadmin):
    return auth_headers(superadmin)


# -----------------------
# Payloads
# -----------------------

def order_payload(product_id, quantity=2, order_type="PICKUP", email="jan@example.com", **overrides):
    customer = {
        "first_name": "Jan",
        "last_name": "de Vries",
        "email": email,
        "phone": "06-12345678",
    }
    if order_type == "DELIVERY":
        customer.update({"address": "Teststraat 123", "city": "Almere", "postal_code": "1234 AB"})
    customer.update(overrides.pop("customer", {}))
    payload = {
        "items": [{"product_id": product_id, "quantity": quantity}],
        "type": order_type,
        "customer": customer,
    }
    payload.update(overrides)
    return payload
