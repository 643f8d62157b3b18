from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from jobledger.core.access.service import AccessService
from jobledger.core.ledger.service import LedgerService
from jobledger.core.reporting.service import ReportingService
from jobledger.db.base import Base
from jobledger.db.models import *  # noqa: F401,F403 - ensure all models loaded
from jobledger.db.session import build_engine, build_session_factory
from jobledger.tests.factories import EntityFactory


# A file database, so concurrent connections in one test see the same rows
@pytest.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(test_engine)


@pytest.fixture
def factory(session_factory) -> EntityFactory:
    return EntityFactory(session_factory)


@pytest.fixture
def ledger(session_factory) -> LedgerService:
    return LedgerService(session_factory, retry_backoff=0.01)


@pytest.fixture
def reporting(session_factory) -> ReportingService:
    return ReportingService(session_factory)


@pytest.fixture
def access(session_factory) -> AccessService:
    return AccessService(session_factory, admin_profile_ids=[])


@pytest.fixture
async def client(session_factory):
    from jobledger.api.deps import get_session_factory
    from jobledger.main import app

    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def client_profile(factory):
    return await factory.client(balance="1000")


@pytest.fixture
async def contractor_profile(factory):
    return await factory.contractor(balance="0")


@pytest.fixture
async def active_contract(factory, client_profile, contractor_profile):
    return await factory.contract(client_profile, contractor_profile)


@pytest.fixture
async def unpaid_job(factory, active_contract):
    return await factory.job(active_contract, "200")
