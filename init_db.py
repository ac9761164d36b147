"""Initialize database tables and the default location"""
import asyncio
from backoffice.database import engine, Base
from backoffice.models import *  # noqa: F401,F403 - Import all models to register them
from backoffice.main import seed_default_location


async def init():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await seed_default_location()
    print("Database tables created successfully.")


if __name__ == "__main__":
    asyncio.run(init())
