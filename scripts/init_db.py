# scripts/init_db.py
import asyncio
import logging

from app.db import create_db_and_tables

log = logging.getLogger(__name__)


async def create_tables():
    # create_db_and_tables imports app.models so every table is registered
    await create_db_and_tables()
    print("✅ All missing tables created.")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(create_tables())
