import logging

from sqlalchemy.ext.asyncio import AsyncSession

from walletledger.core.errors import TransactionNotFound
from walletledger.models import Transaction
from walletledger.schemas.transaction import TransactionRecord
from walletledger.stores import LedgerStore, WalletStore

logger = logging.getLogger(__name__)


class QueryService:
    """Read-only views of the ledger for one requesting user."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.wallets = WalletStore(session)
        self.ledger = LedgerStore(session)

    async def history(self, identity: str) -> list[TransactionRecord]:
        user_id = await self._user_id(identity)
        transactions = await self.ledger.list_for_user(user_id)
        logger.debug("Found %d transactions for %s", len(transactions), identity)
        return self._render(transactions, user_id)

    async def sent(self, identity: str) -> list[TransactionRecord]:
        user_id = await self._user_id(identity)
        return self._render(await self.ledger.list_sent(user_id), user_id)

    async def received(self, identity: str) -> list[TransactionRecord]:
        user_id = await self._user_id(identity)
        return self._render(await self.ledger.list_received(user_id), user_id)

    async def get(self, identity: str, transaction_id: int) -> TransactionRecord:
        user_id = await self._user_id(identity)
        transaction = await self.ledger.get(transaction_id)
        participants = {transaction.from_wallet.user_id, transaction.to_wallet.user_id} if transaction else set()
        if user_id not in participants:
            raise TransactionNotFound(f"Transaction {transaction_id} not found")
        return TransactionRecord.from_transaction(transaction, viewer_id=user_id)

    async def _user_id(self, identity: str) -> int:
        wallet = await self.wallets.get(identity)
        return wallet.user_id

    @staticmethod
    def _render(transactions: list[Transaction], user_id: int) -> list[TransactionRecord]:
        return [TransactionRecord.from_transaction(transaction, viewer_id=user_id) for transaction in transactions]
