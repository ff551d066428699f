from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

from hero_catalog.database.database import create_tables
from hero_catalog.database.repository import HeroRepository, UserRepository
from hero_catalog.favorite.service import FavoriteService
from hero_catalog.hero.service import HeroSyncService
from tests.factories import FakeCatalogClient, FakeClock


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """インメモリSQLiteのエンジン."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def hero_repo(session: AsyncSession) -> HeroRepository:
    return HeroRepository(session)


@pytest.fixture
def user_repo(session: AsyncSession) -> UserRepository:
    return UserRepository(session)


@pytest.fixture
def catalog() -> FakeCatalogClient:
    return FakeCatalogClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sync_service(
    hero_repo: HeroRepository,
    catalog: FakeCatalogClient,
    clock: FakeClock,
) -> HeroSyncService:
    return HeroSyncService(hero_repo=hero_repo, catalog_client=catalog, clock=clock)


@pytest.fixture
def favorite_service(
    hero_repo: HeroRepository,
    user_repo: UserRepository,
) -> FavoriteService:
    return FavoriteService(hero_repo=hero_repo, user_repo=user_repo)
