from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from walletledger.core.errors import WalletNotFound
from walletledger.models import User, Wallet


class WalletStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, identity: str) -> Wallet:
        stmt = select(Wallet).join(Wallet.owner).options(joinedload(Wallet.owner)).where(User.phone == identity)
        result = await self.session.execute(stmt)
        wallet = result.scalar_one_or_none()
        if wallet is None:
            raise WalletNotFound(f"No wallet registered for {identity}", extra={"identity": identity})
        return wallet

    async def get_many_for_update(self, wallet_ids: Sequence[int]) -> list[Wallet]:
        """Load wallets row-locked, in ascending id order.

        ``populate_existing`` makes sure a wallet already in the identity map
        is refreshed with the state visible under the lock.
        """
        stmt = (
            select(Wallet)
            .options(joinedload(Wallet.owner))
            .where(Wallet.id.in_(wallet_ids))
            .order_by(Wallet.id)
            .with_for_update(of=Wallet)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        wallets = list(result.scalars().all())
        missing = set(wallet_ids) - {wallet.id for wallet in wallets}
        if missing:
            raise WalletNotFound("Wallet no longer exists", extra={"wallet_ids": sorted(missing)})
        return wallets

    async def create(self, user: User) -> Wallet:
        self._require_transaction()
        wallet = Wallet(user_id=user.id)
        self.session.add(wallet)
        await self.session.flush()
        return wallet

    async def save(self, wallet: Wallet) -> Wallet:
        self._require_transaction()
        self.session.add(wallet)
        await self.session.flush()
        return wallet

    def _require_transaction(self) -> None:
        if not self.session.in_transaction():
            raise RuntimeError("Wallet mutations must run inside a unit of work")
