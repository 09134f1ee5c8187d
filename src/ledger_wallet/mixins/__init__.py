"""Operation mixins composed into Wallet."""

from ledger_wallet.mixins.accounts import AccountsMixin
from ledger_wallet.mixins.identity import IdentityMixin
from ledger_wallet.mixins.transactions import TransactionsMixin
from ledger_wallet.mixins.transfer import TransferMixin

__all__ = [
    "AccountsMixin",
    "IdentityMixin",
    "TransactionsMixin",
    "TransferMixin",
]
