import os

import pytest
import pytest_asyncio

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("JWT_ISSUER", "wallet-ledger-auth")

from walletledger.core.config import Settings  # noqa: E402
from walletledger.db.locks import WalletLockRegistry  # noqa: E402
from walletledger.db.session import build_engine, build_session_factory, create_schema  # noqa: E402
from walletledger.services import AccountService, TransferEngine  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        jwt_secret="test-secret",
        transfer_lock_timeout_seconds=2.0,
    )


@pytest_asyncio.fixture
async def session_factory(settings):
    engine = build_engine(settings)
    await create_schema(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def locks():
    return WalletLockRegistry()


@pytest_asyncio.fixture
async def transfer_engine(session_factory, locks, settings):
    return TransferEngine(session_factory, locks, lock_timeout=settings.transfer_lock_timeout_seconds)


@pytest_asyncio.fixture
async def accounts(session_factory, locks, settings):
    return AccountService(session_factory, locks, lock_timeout=settings.transfer_lock_timeout_seconds)
