import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

from walletledger.core.errors import TransferTimeout

logger = logging.getLogger(__name__)


class WalletLockRegistry:
    """Per-wallet mutual exclusion for balance mutations inside one process.

    Locks are always taken in ascending wallet id order, so two transfers
    moving money in opposite directions between the same pair cannot deadlock.
    Transfers over disjoint wallets never share a lock.
    """

    def __init__(self) -> None:
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, wallet_id: int) -> asyncio.Lock:
        lock = self._locks.get(wallet_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[wallet_id] = lock
        return lock

    def is_locked(self, wallet_id: int) -> bool:
        lock = self._locks.get(wallet_id)
        return bool(lock and lock.locked())

    @asynccontextmanager
    async def hold(self, *wallet_ids: int, timeout: float) -> AsyncIterator[float]:
        """Hold every given wallet lock; yields the seconds left of ``timeout``."""
        ordered = sorted(set(wallet_ids))
        locks = [self._lock_for(wallet_id) for wallet_id in ordered]
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        acquired: list[asyncio.Lock] = []
        try:
            for wallet_id, lock in zip(ordered, locks):
                remaining = max(deadline - loop.time(), 0)
                try:
                    await asyncio.wait_for(lock.acquire(), remaining)
                except asyncio.TimeoutError:
                    logger.warning("Timed out after %.2fs waiting for wallet %s", timeout, wallet_id)
                    raise TransferTimeout(
                        "Wallet is busy with another transfer, please retry",
                        extra={"wallet_id": wallet_id},
                    ) from None
                acquired.append(lock)
            yield max(deadline - loop.time(), 0)
        finally:
            for lock in reversed(acquired):
                lock.release()
