import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from walletledger.models import Transaction
from walletledger.models.transaction import TransactionStatus
from walletledger.schemas.base import ORMModel


class Direction(str, enum.Enum):
    sent = "SENT"
    received = "RECEIVED"


class TransactionRecord(ORMModel):
    id: int
    from_phone: str
    to_phone: str
    amount: Decimal
    direction: Optional[Direction] = None
    status: TransactionStatus
    created_at: datetime

    @classmethod
    def from_transaction(cls, transaction: Transaction, viewer_id: Optional[int] = None) -> "TransactionRecord":
        """Render a ledger row, labelled relative to ``viewer_id`` when given."""
        direction = None
        if viewer_id is not None:
            direction = Direction.sent if transaction.from_wallet.user_id == viewer_id else Direction.received
        return cls(
            id=transaction.id,
            from_phone=transaction.from_wallet.owner.phone,
            to_phone=transaction.to_wallet.owner.phone,
            amount=transaction.amount,
            direction=direction,
            status=transaction.status,
            created_at=transaction.created_at,
        )
