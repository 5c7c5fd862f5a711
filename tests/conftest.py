import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from smm_broker.db import models
from smm_broker.domain.accounts import AccountService
from smm_broker.domain.wallets import WalletService
from smm_broker.infrastructure.database.base import Base

from tests.helpers import FakeProvider


@pytest_asyncio.fixture
async def engine(tmp_path):
    db_path = tmp_path / "broker.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def user(session_factory):
    async with session_factory() as session, session.begin():
        return await AccountService.with_session(session).create_account(
            first_name="Ada",
            last_name="Obi",
            email="ada@example.com",
        )


@pytest_asyncio.fixture
async def service(session_factory):
    """Active provider service 1001 priced at 2.00 per unit, quantity 10..1000."""
    async with session_factory() as session, session.begin():
        row = models.Service(
            provider_service_id=1001,
            name="Instagram Followers",
            type="Default",
            category="Instagram",
            rate="2.00",
            min="10",
            max="1000",
            is_active=True,
        )
        session.add(row)
        await session.flush()
        return row.id


@pytest_asyncio.fixture
async def wallet(session_factory):
    return WalletService(session_factory)


@pytest_asyncio.fixture
async def provider():
    return FakeProvider()
