from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from app.core.config import settings
from app.models.base import Base

DATABASE_URL = settings.database_url
if not DATABASE_URL:
    raise ValueError("❌ DATABASE_URL is not set!")

# Create engine
engine = create_async_engine(DATABASE_URL, echo=settings.sql_echo)

# Async session maker
async_session = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

# Dependency
async def get_db():
    async with async_session() as session:
        yield session

async def create_db_and_tables():
    import app.models  # triggers __init__.py

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
