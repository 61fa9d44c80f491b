from typing import Optional

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, joinedload

from walletledger.models import Transaction, Wallet
from walletledger.utils.clock import utcnow


class LedgerStore:
    """Append-only access to transfer records.

    Reads always return rows newest first, ties on ``created_at`` broken by
    ``id`` descending. Owner identities of both wallets are loaded eagerly so
    records can be rendered without further queries.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, transaction: Transaction) -> Transaction:
        if transaction.created_at is None:
            transaction.created_at = utcnow()
        self.session.add(transaction)
        await self.session.flush()
        return transaction

    async def get(self, transaction_id: int) -> Optional[Transaction]:
        stmt = self._base_query().where(Transaction.id == transaction_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> list[Transaction]:
        sender, recipient = aliased(Wallet), aliased(Wallet)
        stmt = (
            self._base_query()
            .join(sender, Transaction.from_wallet_id == sender.id)
            .join(recipient, Transaction.to_wallet_id == recipient.id)
            .where(or_(sender.user_id == user_id, recipient.user_id == user_id))
        )
        return await self._fetch(stmt)

    async def list_sent(self, user_id: int) -> list[Transaction]:
        sender = aliased(Wallet)
        stmt = self._base_query().join(sender, Transaction.from_wallet_id == sender.id).where(sender.user_id == user_id)
        return await self._fetch(stmt)

    async def list_received(self, user_id: int) -> list[Transaction]:
        recipient = aliased(Wallet)
        stmt = (
            self._base_query()
            .join(recipient, Transaction.to_wallet_id == recipient.id)
            .where(recipient.user_id == user_id)
        )
        return await self._fetch(stmt)

    async def _fetch(self, stmt: Select) -> list[Transaction]:
        result = await self.session.execute(stmt.order_by(Transaction.created_at.desc(), Transaction.id.desc()))
        return list(result.scalars().unique().all())

    @staticmethod
    def _base_query() -> Select:
        return select(Transaction).options(
            joinedload(Transaction.from_wallet).joinedload(Wallet.owner),
            joinedload(Transaction.to_wallet).joinedload(Wallet.owner),
        )
