from walletledger.services.accounts import AccountService
from walletledger.services.query import QueryService
from walletledger.services.transfer import TransferEngine

__all__ = ["AccountService", "QueryService", "TransferEngine"]
