from walletledger.stores.ledger import LedgerStore
from walletledger.stores.wallets import WalletStore

__all__ = ["LedgerStore", "WalletStore"]
