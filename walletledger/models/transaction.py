import enum
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from walletledger.db.session import Base
from walletledger.utils.clock import utcnow


class TransactionType(str, enum.Enum):
    transfer = "transfer"


class TransactionStatus(str, enum.Enum):
    success = "SUCCESS"
    failed = "FAILED"


if TYPE_CHECKING:
    from walletledger.models.wallet import Wallet


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        CheckConstraint("from_wallet_id <> to_wallet_id", name="ck_transactions_distinct_wallets"),
        Index("ix_transactions_from_wallet_created", "from_wallet_id", "created_at"),
        Index("ix_transactions_to_wallet_created", "to_wallet_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    from_wallet_id: Mapped[int] = mapped_column(ForeignKey("wallets.id"), nullable=False)
    to_wallet_id: Mapped[int] = mapped_column(ForeignKey("wallets.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name="transaction_type"), default=TransactionType.transfer, nullable=False
    )
    status: Mapped[TransactionStatus] = mapped_column(
        Enum(TransactionStatus, name="transaction_status"), default=TransactionStatus.success, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    from_wallet: Mapped["Wallet"] = relationship(foreign_keys=[from_wallet_id])
    to_wallet: Mapped["Wallet"] = relationship(foreign_keys=[to_wallet_id])
