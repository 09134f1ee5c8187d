"""HTTP clients for the accounts and ledger services, and the hardware-wallet proxy."""

from ledger_wallet.clients.accounts_client import AccountsClient
from ledger_wallet.clients.hardware_wallet import KeyDirectoryHardwareWalletProxy
from ledger_wallet.clients.ledger_client import LedgerClient

__all__ = ["AccountsClient", "KeyDirectoryHardwareWalletProxy", "LedgerClient"]
