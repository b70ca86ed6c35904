from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.customer.customer import Customer
from app.schemas.order import CustomerDetails

CONTACT_FIELDS = ("first_name", "last_name", "phone", "address", "city", "postal_code")


async def get_customer_by_email(db: AsyncSession, tenant_id: str, email: str) -> Optional[Customer]:
    result = await db.execute(
        select(Customer).where(Customer.tenant_id == tenant_id, Customer.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


def _insert_ignoring_duplicates(db: AsyncSession, values: dict):
    # asyncpg in production, aiosqlite locally; both speak ON CONFLICT
    if db.get_bind().dialect.name == "postgresql":
        stmt = postgresql.insert(Customer)
    else:
        stmt = sqlite.insert(Customer)
    return stmt.values(**values).on_conflict_do_nothing()


async def get_or_create_customer(
    db: AsyncSession,
    tenant_id: str,
    details: CustomerDetails,
    update_existing: bool = False,
) -> Customer:
    """Find the tenant's customer by email, creating it on first order.

    An existing record is reused untouched unless ``update_existing`` is set,
    in which case the supplied non-empty contact fields overwrite it. Does not
    commit.

    Two first orders from the same address may race; the insert skips the
    duplicate and both orders end up on the row that won.
    """
    email = str(details.email).strip().lower()
    customer = await get_customer_by_email(db, tenant_id, email)

    if customer is None:
        values = {"tenant_id": tenant_id, "email": email}
        for field in CONTACT_FIELDS:
            values[field] = getattr(details, field)
        await db.execute(_insert_ignoring_duplicates(db, values))
        customer = await get_customer_by_email(db, tenant_id, email)

    if update_existing:
        for field in CONTACT_FIELDS:
            value = getattr(details, field)
            if value:
                setattr(customer, field, value)
        await db.flush()

    return customer
