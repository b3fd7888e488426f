"""
Shared test fixtures for Payout Ledger.

Provides a throwaway SQLite database (aiosqlite driver) per test, registry
and calculator instances, session-cookie helpers, and an async HTTP client
with ``get_db`` overridden to use the test database.
"""

import os

# ── Patch settings BEFORE any app modules are imported ─────────────────────

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./.pytest-payout-ledger.db")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("SEED_ON_STARTUP", "false")

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from payout_ledger.core import security  # noqa: E402
from payout_ledger.core.currency import CurrencyConverter, RateTable  # noqa: E402
from payout_ledger.database import Base, get_db  # noqa: E402
from payout_ledger.services.fee_calculator import FeeChainCalculator  # noqa: E402
from payout_ledger.services.platform_registry import PlatformFeeRegistry  # noqa: E402

TEST_SECRET = "test-secret-not-for-production-use-only"


# --- Session token secret ---


@pytest.fixture(autouse=True)
def auth_secret():
    """Sign and verify session cookies with a fixed test secret."""
    security.configure_secret(TEST_SECRET)
    return TEST_SECRET


@pytest.fixture
def make_token():
    """Factory fixture returning a valid session token for a user id."""
    return security.create_access_token


# --- Database ---


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database file with all tables created."""
    import payout_ledger.models  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def registry(db_session):
    return PlatformFeeRegistry(db_session)


@pytest.fixture
def failing_db():
    """AsyncMock session whose every query fails like a dropped connection."""
    from sqlalchemy.exc import OperationalError

    error = OperationalError("SELECT 1", {}, Exception("connection refused"))
    db = AsyncMock()
    db.execute = AsyncMock(side_effect=error)
    db.scalar = AsyncMock(side_effect=error)
    db.flush = AsyncMock(side_effect=error)
    db.commit = AsyncMock(side_effect=error)
    db.rollback = AsyncMock()
    db.add = MagicMock()
    return db


# --- Currency ---


@pytest.fixture
def converter():
    return CurrencyConverter(RateTable())


@pytest.fixture
def calculator(converter):
    return FeeChainCalculator(converter)


# --- HTTP client ---


@pytest_asyncio.fixture
async def client(session_factory):
    """
    Async HTTP test client with get_db overridden to use the test database.
    """
    from payout_ledger.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def login(client, make_token):
    """Set the session cookie on the test client for *user_id*."""

    def _login(user_id: str) -> None:
        client.cookies.set("auth-token", make_token(user_id))

    return _login


# --- Sample Data ---


@pytest.fixture
def sample_platform():
    """Sample custom platform payload as the web client sends it."""
    return {
        "platformName": "PeoplePerHour",
        "platformFeePercentage": 12.5,
        "withdrawalFees": {
            "platformToLocalBank": {"amount": 2, "currency": "gbp"},
        },
    }
