from decimal import Decimal
from typing import Any

from pydantic import Field

from walletledger.models.status import AccountStatus
from walletledger.schemas.base import ORMModel


class WalletOut(ORMModel):
    wallet_id: int
    balance: Decimal
    status: AccountStatus


class TransferRequest(ORMModel):
    to_phone: str = Field(min_length=1, max_length=32)
    # Validated by the transfer engine so malformed amounts surface as invalid_amount.
    amount: Any = Field(..., description="Decimal string or integer, at most two decimal places", examples=["40.50"])
