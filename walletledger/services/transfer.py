import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from walletledger.core.errors import InsufficientFunds, InvalidOperation, LedgerError, WalletInactive
from walletledger.db.locks import WalletLockRegistry
from walletledger.db.unit_of_work import UnitOfWork
from walletledger.models import Transaction, Wallet
from walletledger.models.transaction import TransactionStatus, TransactionType
from walletledger.schemas.transaction import TransactionRecord
from walletledger.stores import LedgerStore, WalletStore
from walletledger.utils.clock import utcnow
from walletledger.utils.money import AmountLike, parse_amount

logger = logging.getLogger(__name__)


class TransferEngine:
    """Moves money between two wallets as one indivisible unit of work.

    Both wallets are locked (ascending id) before their balances are read
    for validation, so concurrent transfers sharing a wallet apply their
    balance changes one after another.
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

    async def transfer(self, from_identity: str, to_identity: str, amount: AmountLike) -> TransactionRecord:
        logger.info("Starting transfer: from=%s to=%s amount=%s", from_identity, to_identity, amount)
        try:
            record = await self._transfer(from_identity, to_identity, amount)
        except LedgerError as exc:
            logger.warning(
                "Transfer rejected: from=%s to=%s amount=%s code=%s reason=%s",
                from_identity,
                to_identity,
                amount,
                exc.code,
                exc.message,
            )
            raise
        logger.info(
            "Transfer completed: transaction=%d from=%s to=%s amount=%s",
            record.id,
            from_identity,
            to_identity,
            record.amount,
        )
        return record

    async def _transfer(self, from_identity: str, to_identity: str, amount: AmountLike) -> TransactionRecord:
        if from_identity == to_identity:
            raise InvalidOperation("Cannot transfer to yourself")
        value = parse_amount(amount)

        async def resolve(session: AsyncSession) -> tuple[int, int]:
            store = WalletStore(session)
            source = await store.get(from_identity)
            target = await store.get(to_identity)
            return source.id, target.id

        source_id, target_id = await self.unit_of_work.run(resolve)

        async def apply(session: AsyncSession) -> TransactionRecord:
            return await self._apply(session, source_id, target_id, value)

        async with self.locks.hold(source_id, target_id, timeout=self.lock_timeout) as remaining:
            return await self.unit_of_work.run(apply, timeout=remaining)

    async def _apply(self, session: AsyncSession, source_id: int, target_id: int, amount: Decimal) -> TransactionRecord:
        wallets = WalletStore(session)
        locked = {wallet.id: wallet for wallet in await wallets.get_many_for_update([source_id, target_id])}
        source, target = locked[source_id], locked[target_id]
        self._ensure_transferable(source, target, amount)

        now = utcnow()
        source.balance -= amount
        source.updated_at = now
        target.balance += amount
        target.updated_at = now
        await wallets.save(source)
        await wallets.save(target)

        transaction = await LedgerStore(session).append(
            Transaction(
                from_wallet=source,
                to_wallet=target,
                amount=amount,
                type=TransactionType.transfer,
                status=TransactionStatus.success,
                created_at=now,
            )
        )
        return TransactionRecord.from_transaction(transaction)

    @staticmethod
    def _ensure_transferable(source: Wallet, target: Wallet, amount: Decimal) -> None:
        if not source.is_active:
            raise WalletInactive("Sender wallet is not active", extra={"wallet_id": source.id})
        if not target.is_active:
            raise WalletInactive("Receiver wallet is not active", extra={"wallet_id": target.id})
        if source.balance < amount:
            raise InsufficientFunds(
                f"Insufficient balance: required {amount}, available {source.balance}",
                extra={"required": str(amount), "available": str(source.balance)},
            )
