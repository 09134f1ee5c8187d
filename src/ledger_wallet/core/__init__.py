"""Core infrastructure components."""

from ledger_wallet.core.exceptions import (
    AccountValidationError,
    MissingIdentityError,
    ServiceError,
    TransportError,
)
from ledger_wallet.core.state import AccountsStore

__all__ = [
    "AccountValidationError",
    "AccountsStore",
    "MissingIdentityError",
    "ServiceError",
    "TransportError",
]
