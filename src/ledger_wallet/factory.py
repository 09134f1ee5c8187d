"""WalletFactory — builds wired wallets and session identities from config."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ledger_wallet.clients.accounts_client import AccountsClient
from ledger_wallet.clients.hardware_wallet import KeyDirectoryHardwareWalletProxy
from ledger_wallet.clients.ledger_client import LedgerClient
from ledger_wallet.config import get_settings, load_settings
from ledger_wallet.core.state import AccountsStore
from ledger_wallet.identity import Identity, SessionIdentityProvider
from ledger_wallet.notifier import LoggingNotifier
from ledger_wallet.signing import generate_keypair, load_private_key
from ledger_wallet.wallet import Wallet

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ledger_wallet.config import Settings
    from ledger_wallet.models import HardwareWalletAccount


class WalletFactory:
    """Factory that wires a Wallet from settings.

    Callers never deal with base URLs, paths or key files; they ask for a
    wallet and for the identity of a key handle.

    Args:
        config_path: Path to config.yaml. If None, resolved via the
            LEDGER_WALLET_CONFIG_PATH env var or ./config.yaml.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self.settings: Settings = (
            load_settings(config_path) if config_path is not None else get_settings()
        )

    def create_wallet(
        self,
        approve_hardware_wallet: Callable[[HardwareWalletAccount], Awaitable[bool]] | None = None,
    ) -> Wallet:
        """Create a logged-out Wallet with fresh clients and an empty store.

        Args:
            approve_hardware_wallet: Awaited before a device identity is used.
                Defaults to approving every request.
        """
        accounts = self.settings.accounts
        ledger = self.settings.ledger

        proxy = KeyDirectoryHardwareWalletProxy(
            devices_dir=self.settings.data.hardware_wallet_keys_dir,
            approve=approve_hardware_wallet,
        )
        return Wallet(
            identity_provider=SessionIdentityProvider(proxy),
            accounts_client=AccountsClient(
                base_url=accounts.base_url,
                accounts_path=accounts.accounts_path,
                sub_accounts_path=accounts.sub_accounts_path,
                rename_sub_account_path=accounts.rename_sub_account_path,
                transactions_path=accounts.transactions_path,
                page_size=accounts.page_size,
                timeout_seconds=accounts.timeout_seconds,
            ),
            ledger_client=LedgerClient(
                base_url=ledger.base_url,
                transfer_path=ledger.transfer_path,
                transaction_fee_path=ledger.transaction_fee_path,
                timeout_seconds=ledger.timeout_seconds,
            ),
            accounts_store=AccountsStore(),
            notifier=LoggingNotifier(),
        )

    def load_identity(self, handle: str) -> Identity:
        """Load the session identity for `handle`, generating its keypair if missing.

        Args:
            handle: Key file prefix inside data.keys_dir (e.g. "alice").
        """
        keys_dir = Path(self.settings.data.keys_dir)
        private_path = keys_dir / f"{handle}.key"
        if private_path.exists():
            return Identity(load_private_key(private_path))

        private_key, _public_key = generate_keypair(handle, keys_dir)
        return Identity(private_key)
