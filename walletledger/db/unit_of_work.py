import logging
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from walletledger.core.errors import StorageUnavailable, TransferTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

# lock_not_available, query_canceled
POSTGRES_LOCK_WAIT_CODES = {"55P03", "57014"}
# sqlite3 driver default, in seconds
SQLITE_DEFAULT_BUSY_TIMEOUT = 5.0


class UnitOfWork:
    """Runs a block of reads and writes in one database transaction.

    The block receives a fresh session. Returning normally commits; any
    exception rolls everything back. Ledger errors propagate unchanged,
    storage errors are re-raised as ``StorageUnavailable``.

    With ``timeout`` set, every database lock wait inside the block is
    capped at that many seconds and running out raises ``TransferTimeout``.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def run(self, work: Callable[[AsyncSession], Awaitable[T]], *, timeout: Optional[float] = None) -> T:
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    await self._bound_lock_waits(session, timeout)
                    return await work(session)
            except StaleDataError as exc:
                logger.warning("Concurrent modification detected, unit of work rolled back: %s", exc)
                raise StorageUnavailable("Wallet was modified concurrently, please retry") from exc
            except SQLAlchemyError as exc:
                if timeout is not None and self._is_lock_wait(exc):
                    logger.warning("Database lock wait exceeded %.3fs, unit of work rolled back", timeout)
                    raise TransferTimeout("Wallet is locked by another transfer, please retry") from exc
                logger.exception("Unit of work rolled back after storage error: %s", exc)
                raise StorageUnavailable("Storage is unavailable, no changes were applied") from exc

    @staticmethod
    async def _bound_lock_waits(session: AsyncSession, timeout: Optional[float]) -> None:
        dialect = session.bind.dialect.name
        if dialect == "postgresql" and timeout is not None:
            milliseconds = max(int(timeout * 1000), 1)
            # SET LOCAL ends with the transaction.
            await session.execute(text(f"SET LOCAL lock_timeout = {milliseconds}"))
            await session.execute(text(f"SET LOCAL statement_timeout = {milliseconds}"))
        elif dialect == "sqlite":
            # busy_timeout outlives the transaction on a pooled connection, so it is always reset.
            seconds = SQLITE_DEFAULT_BUSY_TIMEOUT if timeout is None else timeout
            await session.execute(text(f"PRAGMA busy_timeout = {max(int(seconds * 1000), 1)}"))

    @staticmethod
    def _is_lock_wait(exc: SQLAlchemyError) -> bool:
        orig = getattr(exc, "orig", None)
        if orig is None:
            return False
        code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if code in POSTGRES_LOCK_WAIT_CODES:
            return True
        return "database is locked" in str(orig)
