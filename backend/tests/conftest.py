"""Pytest configuration and fixtures for linear vesting tests"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEBUG", "false")

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from solders.pubkey import Pubkey
from dotenv import load_dotenv

from linear_vesting.main import app
from linear_vesting.api.deps import get_clock
from linear_vesting.models import Base, get_db
from linear_vesting.services.clock import Clock
from linear_vesting.services.grant_operations import GrantOperations
from linear_vesting.services.token_ledger import TokenLedger

# Load environment variables
load_dotenv()

# Each test gets its own in-memory database; StaticPool keeps the single connection alive
TEST_DATABASE_URL = "sqlite+aiosqlite://"

START_TS = 1704067200  # 2024-01-01
DEPOSIT = 1_000_000


class FrozenClock(Clock):
    """Clock that only moves when a test moves it"""

    def __init__(self, current: int):
        self.current = current

    async def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> None:
        self.current += seconds


@pytest_asyncio.fixture(scope="function")
async def session_factory():
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test"""
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(START_TS)


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, clock) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client bound to the test database and frozen clock"""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def owner() -> str:
    return str(Pubkey.new_unique())


@pytest.fixture
def beneficiary() -> str:
    return str(Pubkey.new_unique())


@pytest.fixture
def mint() -> str:
    return str(Pubkey.new_unique())


@pytest.fixture
def stranger() -> str:
    return str(Pubkey.new_unique())


@pytest.fixture
def ledger(db_session) -> TokenLedger:
    return TokenLedger(db_session)


@pytest.fixture
def ops(db_session, ledger) -> GrantOperations:
    return GrantOperations(db_session, ledger=ledger)


@pytest.fixture
def grant_params(owner, beneficiary, mint):
    """Keyword arguments for GrantOperations.initialize: 100s linear vesting, no cliff"""
    return {
        "owner": owner,
        "beneficiary": beneficiary,
        "mint": mint,
        "amount": DEPOSIT,
        "start_ts": START_TS,
        "cliff_ts": START_TS,
        "duration": 100,
        "revocable": True,
        "now": START_TS,
    }
