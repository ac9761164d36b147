"""
Test fixtures - temporary SQLite database + HTTP client with a fake weather provider
"""
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from backoffice.api.forecast import get_weather_provider
from backoffice.database import Base, get_session_factory
from backoffice.main import app
from backoffice.models import JobRole, Location
from backoffice.models.enums import Department
from backoffice.tests.helpers import FakeWeatherProvider


@pytest_asyncio.fixture()
async def session_factory(tmp_path):
    """A fresh file-backed SQLite database per test (shared by concurrent sessions)"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'backoffice.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory

    await engine.dispose()


@pytest_asyncio.fixture()
async def seed_data(session_factory):
    """Insert baseline test data: one location + FOH and kitchen roles"""
    async with session_factory() as session:
        tavern = Location(name="The Tavern", code="TAV", latitude=51.8994, longitude=-2.0783)
        session.add(tavern)
        await session.flush()

        bartender = JobRole(location_id=tavern.id, name="Bartender", department=Department.FOH)
        chef = JobRole(location_id=tavern.id, name="Line Chef", department=Department.KITCHEN)
        session.add_all([bartender, chef])
        await session.commit()

        return {"location": tavern, "bartender": bartender, "chef": chef}


@pytest_asyncio.fixture()
async def weather_provider():
    return FakeWeatherProvider()


@pytest_asyncio.fixture()
async def client(session_factory, seed_data, weather_provider):
    """httpx AsyncClient bound to the FastAPI app"""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_weather_provider] = lambda: weather_provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()
