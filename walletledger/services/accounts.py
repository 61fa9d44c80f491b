import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from walletledger.core.errors import IdentityAlreadyRegistered
from walletledger.db.locks import WalletLockRegistry
from walletledger.db.unit_of_work import UnitOfWork
from walletledger.models import AccountStatus, User, Wallet
from walletledger.schemas.wallet import WalletOut
from walletledger.stores import WalletStore

logger = logging.getLogger(__name__)


class AccountService:
    """Wallet lifecycle around the transfer core.

    A wallet is opened together with its user, in the same unit of work, and
    lives as long as the user does. Status changes take the same wallet lock
    as transfers so a block never lands halfway through one.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        locks: WalletLockRegistry,
        *,
        lock_timeout: float,
    ):
        self.unit_of_work = UnitOfWork(session_factory)
        self.locks = locks
        self.lock_timeout = lock_timeout

    async def open_account(self, phone: str) -> WalletOut:
        async def work(session: AsyncSession) -> WalletOut:
            existing = await session.execute(select(User.id).where(User.phone == phone))
            if existing.scalar_one_or_none() is not None:
                raise IdentityAlreadyRegistered(f"Phone number {phone} is already registered")
            user = User(phone=phone, status=AccountStatus.active)
            session.add(user)
            try:
                await session.flush()
            except IntegrityError as exc:
                raise IdentityAlreadyRegistered(f"Phone number {phone} is already registered") from exc
            wallet = await WalletStore(session).create(user)
            return self._render(wallet)

        wallet = await self.unit_of_work.run(work)
        logger.info("Opened account for %s with wallet %d", phone, wallet.wallet_id)
        return wallet

    async def balance(self, identity: str) -> WalletOut:
        async def work(session: AsyncSession) -> WalletOut:
            return self._render(await WalletStore(session).get(identity))

        return await self.unit_of_work.run(work)

    async def set_wallet_status(self, identity: str, status: AccountStatus) -> WalletOut:
        wallet = await self.balance(identity)

        async def work(session: AsyncSession) -> WalletOut:
            store = WalletStore(session)
            (locked,) = await store.get_many_for_update([wallet.wallet_id])
            locked.status = status
            await store.save(locked)
            return self._render(locked)

        async with self.locks.hold(wallet.wallet_id, timeout=self.lock_timeout) as remaining:
            updated = await self.unit_of_work.run(work, timeout=remaining)
        logger.info("Wallet %d of %s is now %s", updated.wallet_id, identity, status.value)
        return updated

    @staticmethod
    def _render(wallet: Wallet) -> WalletOut:
        return WalletOut(wallet_id=wallet.id, balance=wallet.balance, status=wallet.status)
