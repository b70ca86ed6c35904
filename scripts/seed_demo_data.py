"""
Seed Demo Data: super-admin, Pizza Mario tenant, menu

Creates the platform super-admin and an ACTIVE demo restaurant with
settings, staff, categories, products and one repeat customer.
It is SAFE to run multiple times (idempotent).

Usage:
    python -m scripts.seed_demo_data
"""

import asyncio
import sys
from decimal import Decimal

if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from sqlalchemy.future import select

from app.db import async_session, create_db_and_tables
from app.models.customer.customer import Customer
from app.models.menu.category import Category
from app.models.menu.product import Product
from app.models.tenant import Tenant, TenantSettings, TenantStatus
from app.models.user import User, UserRole

# -------------------------------------------------------------------
# SEED DATA
# -------------------------------------------------------------------
SUPERADMIN = {"email": "admin@fooddupe.nl", "first_name": "Super", "last_name": "Admin"}

TENANT = {
    "name": "Pizza Mario",
    "subdomain": "pizzamario",
    "email": "owner@pizzamario.nl",
    "phone": "036-841-4025",
    "plan": "professional",
}

STAFF = [
    {"email": "owner@pizzamario.nl", "first_name": "Mario", "last_name": "Rossi", "role": UserRole.OWNER},
    {"email": "kassier@pizzamario.nl", "first_name": "Giovanni", "last_name": "Bianchi", "role": UserRole.EMPLOYEE},
]

# (slug, name, sort_order) -> [(name, description, price, is_popular)]
MENU = {
    ("pizzas", "Pizza's", 1): [
        ("Margherita", "Tomatensaus, mozzarella, verse basilicum", "12.50", True),
        ("Pepperoni", "Tomatensaus, mozzarella, pepperoni", "15.00", False),
        ("Quattro Stagioni", "Tomatensaus, mozzarella, ham, champignons, artisjokken, olijven", "18.50", True),
        ("Hawaii", "Tomatensaus, mozzarella, ham, ananas", "16.00", False),
        ("Diavola", "Tomatensaus, mozzarella, salami piccante", "16.50", True),
    ],
    ("pasta", "Pasta", 2): [
        ("Spaghetti Carbonara", "Romige saus met spek, ei en parmezaanse kaas", "14.50", True),
        ("Penne Bolognese", "Traditionele vleessaus met verse kruiden", "13.50", True),
        ("Penne Arrabbiata", "Pittige tomatensaus met knoflook en rode peper", "13.00", False),
        ("Spaghetti Aglio e Olio", "Olijfolie, knoflook, peterselie en rode peper", "12.00", False),
    ],
    ("drinks", "Dranken", 3): [
        ("Coca Cola", "Frisdrank 330ml", "2.50", True),
        ("Fanta", "Sinaasappel frisdrank 330ml", "2.50", False),
        ("Sprite", "Citrus frisdrank 330ml", "2.50", False),
        ("Water", "Spa rood 500ml", "2.00", False),
        ("Heineken", "Nederlandse pils 330ml", "3.50", True),
    ],
}

CUSTOMER = {
    "email": "klant@example.com",
    "first_name": "Jan",
    "last_name": "de Vries",
    "phone": "06-12345678",
    "address": "Teststraat 123",
    "city": "Almere",
    "postal_code": "1234 AB",
}


# -------------------------------------------------------------------
# SEED FUNCTION
# -------------------------------------------------------------------
async def _ensure_user(session, data, tenant_id=None):
    result = await session.execute(select(User).where(User.email == data["email"]))
    if result.scalar_one_or_none():
        print(f"⚠️  User '{data['email']}' already exists. Skipping.")
        return
    session.add(User(tenant_id=tenant_id, **data))
    print(f"✅ Created: {data['email']} ({data['role'].value})")


async def seed_demo_data():
    await create_db_and_tables()

    async with async_session() as session:
        await _ensure_user(session, {**SUPERADMIN, "role": UserRole.SUPERADMIN})

        # 🔁 Step 1: Ensure the demo tenant exists
        result = await session.execute(select(Tenant).where(Tenant.subdomain == TENANT["subdomain"]))
        tenant = result.scalar_one_or_none()
        if not tenant:
            tenant = Tenant(status=TenantStatus.ACTIVE, last_order_number=0, **TENANT)
            tenant.settings = TenantSettings(
                currency="EUR",
                timezone="Europe/Amsterdam",
                language="nl",
                delivery_fee=Decimal("2.50"),
                free_delivery_threshold=Decimal("20.00"),
                tax_rate=Decimal("0.21"),
            )
            session.add(tenant)
            await session.flush()
            print(f"🏢 Created tenant: {tenant.name} ({tenant.subdomain})")
        else:
            print(f"🏢 Tenant '{tenant.name}' already exists.")

        # 🔁 Step 2: Staff linked to the tenant
        for staff in STAFF:
            await _ensure_user(session, staff, tenant_id=tenant.id)

        # 🔁 Step 3: Menu
        created = 0
        for (slug, name, sort_order), products in MENU.items():
            result = await session.execute(
                select(Category).where(Category.tenant_id == tenant.id, Category.slug == slug)
            )
            category = result.scalar_one_or_none()
            if not category:
                category = Category(tenant_id=tenant.id, name=name, slug=slug, sort_order=sort_order)
                session.add(category)
                await session.flush()

            result = await session.execute(select(Product.name).where(Product.category_id == category.id))
            existing_names = {row[0] for row in result.all()}
            for index, (product_name, description, price, popular) in enumerate(products):
                if product_name in existing_names:
                    continue
                session.add(Product(
                    tenant_id=tenant.id,
                    category_id=category.id,
                    name=product_name,
                    description=description,
                    price=Decimal(price),
                    is_popular=popular,
                    sort_order=index,
                ))
                created += 1

        # 🔁 Step 4: One repeat customer
        result = await session.execute(
            select(Customer).where(Customer.tenant_id == tenant.id, Customer.email == CUSTOMER["email"])
        )
        if not result.scalar_one_or_none():
            session.add(Customer(tenant_id=tenant.id, **CUSTOMER))

        await session.commit()

        print("\nSeed complete.")
        print(f"  Products created: {created}")
        print(f"  Test tenant: {tenant.subdomain}")
        print(f"  Customer website: http://{tenant.subdomain}.localhost")
        print("  Staff tokens: python -m scripts.manage_users --token owner@pizzamario.nl")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
