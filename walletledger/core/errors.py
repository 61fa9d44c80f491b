"""Typed failures raised by the ledger core.

Every error carries a stable ``code`` and the HTTP status the request layer
answers with, so callers branch on the type instead of parsing messages.
"""

from typing import Any, Dict, Optional


class LedgerError(Exception):
    code = "ledger_error"
    status_code = 400

    def __init__(self, message: str, *, extra: Optional[Dict[str, Any]] = None):
        self.message = message
        self.extra = extra or {}
        super().__init__(message)

    def as_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.extra}


class InvalidOperation(LedgerError):
    code = "invalid_operation"
    status_code = 400


class InvalidAmount(LedgerError):
    code = "invalid_amount"
    status_code = 400


class WalletNotFound(LedgerError):
    code = "wallet_not_found"
    status_code = 404


class TransactionNotFound(LedgerError):
    code = "transaction_not_found"
    status_code = 404


class WalletInactive(LedgerError):
    code = "wallet_inactive"
    status_code = 403


class InsufficientFunds(LedgerError):
    code = "insufficient_funds"
    status_code = 422


class IdentityAlreadyRegistered(LedgerError):
    code = "identity_already_registered"
    status_code = 409


class TransferTimeout(LedgerError):
    code = "transfer_timeout"
    status_code = 503


class StorageUnavailable(LedgerError):
    code = "storage_unavailable"
    status_code = 503
