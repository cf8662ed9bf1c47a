import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from tests.fixtures.json_loader import TestDataLoader
from src.depends import get_identity_provider, get_token_ledger, get_unit_of_work
from src.adapter.services.identity_provider import JwtIdentityProvider, TokenLedger
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork


@pytest.fixture
def test_data():
    return TestDataLoader()


@pytest.fixture
def outbox():
    """Magic links 'sent' during a test, as (email, link) pairs"""
    return []


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session, outbox):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    def override_get_token_ledger():
        return TokenLedger(lambda: SqlAlchemyUnitOfWork(db_session))

    def override_get_identity_provider(ledger: TokenLedger = Depends(get_token_ledger)):
        return JwtIdentityProvider(ledger, sender=lambda email, link: outbox.append((email, link)))

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_token_ledger] = override_get_token_ledger
    app.dependency_overrides[get_identity_provider] = override_get_identity_provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
