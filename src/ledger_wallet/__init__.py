"""Ledger Wallet — account identity resolution and balance/transaction synchronization."""

from ledger_wallet.factory import WalletFactory
from ledger_wallet.identity import Identity
from ledger_wallet.wallet import Wallet

__version__ = "0.1.0"

__all__ = ["Identity", "Wallet", "WalletFactory"]
