from walletledger.models.status import AccountStatus
from walletledger.models.user import User
from walletledger.models.wallet import Wallet
from walletledger.models.transaction import Transaction

__all__ = ["AccountStatus", "User", "Wallet", "Transaction"]
