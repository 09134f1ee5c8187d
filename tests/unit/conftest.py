"""Unit test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock

import pytest
import yaml
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ledger_wallet.config import clear_settings_cache
from ledger_wallet.core.state import AccountsStore
from ledger_wallet.identity import Identity, SessionIdentityProvider
from ledger_wallet.models import AccountsState, HardwareWalletAccount, MainAccount, SubAccount
from ledger_wallet.notifier import LoggingNotifier
from ledger_wallet.wallet import Wallet

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def identity() -> Identity:
    """A fresh session identity."""
    return Identity(Ed25519PrivateKey.generate())


@pytest.fixture()
def device_identity() -> Identity:
    """Identity held by a hardware wallet."""
    return Identity(Ed25519PrivateKey.generate())


@pytest.fixture()
def main_account(identity: Identity) -> MainAccount:
    return MainAccount(
        identifier=identity.account_identifier(),
        principal=identity.principal,
        balance=1_000_000_000,
    )


@pytest.fixture()
def sub_account(identity: Identity) -> SubAccount:
    path = bytes(31) + b"\x01"
    return SubAccount(
        identifier=identity.account_identifier(path),
        name="savings",
        balance=50_000_000,
        derivation_path=tuple(path),
    )


@pytest.fixture()
def hardware_wallet_account(device_identity: Identity) -> HardwareWalletAccount:
    return HardwareWalletAccount(
        identifier=device_identity.account_identifier(),
        name="ledger nano",
        principal=device_identity.principal,
        balance=0,
    )


@pytest.fixture()
def accounts_state(
    main_account: MainAccount,
    sub_account: SubAccount,
    hardware_wallet_account: HardwareWalletAccount,
) -> AccountsState:
    return AccountsState(
        main=main_account,
        sub_accounts=(sub_account,),
        hardware_wallets=(hardware_wallet_account,),
    )


@pytest.fixture()
def hardware_wallet_proxy(device_identity: Identity) -> AsyncMock:
    proxy = AsyncMock()
    proxy.get_identity = AsyncMock(return_value=device_identity)
    return proxy


@pytest.fixture()
def accounts_client(main_account: MainAccount) -> AsyncMock:
    client = AsyncMock()
    client.load_accounts = AsyncMock(return_value=AccountsState(main=main_account))
    client.create_sub_account = AsyncMock(return_value=None)
    client.rename_sub_account = AsyncMock(return_value=None)
    client.get_transactions = AsyncMock(return_value=[])
    return client


@pytest.fixture()
def ledger_client() -> AsyncMock:
    client = AsyncMock()
    client.send_icp = AsyncMock(return_value=42)
    client.transaction_fee = AsyncMock(return_value=10_000)
    return client


@pytest.fixture()
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture()
def wallet(
    identity: Identity,
    hardware_wallet_proxy: AsyncMock,
    accounts_client: AsyncMock,
    ledger_client: AsyncMock,
    notifier: LoggingNotifier,
) -> Wallet:
    """A logged-in wallet over mocked service clients."""
    provider = SessionIdentityProvider(hardware_wallet_proxy)
    provider.login(identity)
    return Wallet(
        identity_provider=provider,
        accounts_client=accounts_client,
        ledger_client=ledger_client,
        accounts_store=AccountsStore(),
        notifier=notifier,
    )


@pytest.fixture()
def sample_config(tmp_path: Path) -> Path:
    """Write a complete config.yaml into a temporary directory."""
    config: dict[str, Any] = {
        "service": {"name": "ledger_wallet", "version": "0.1.0"},
        "logging": {"level": "INFO", "directory": None},
        "accounts": {
            "base_url": "http://localhost:8010",
            "accounts_path": "/accounts",
            "sub_accounts_path": "/accounts/sub-accounts",
            "rename_sub_account_path": "/accounts/sub-accounts/{identifier}/name",
            "transactions_path": "/accounts/{identifier}/transactions",
            "page_size": 100,
            "timeout_seconds": 10,
        },
        "ledger": {
            "base_url": "http://localhost:8011",
            "transfer_path": "/transfers",
            "transaction_fee_path": "/transaction-fee",
            "timeout_seconds": 10,
        },
        "data": {"keys_dir": "keys", "hardware_wallet_keys_dir": "devices"},
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(config))
    return config_path


@pytest.fixture(autouse=True)
def _clear_config_cache() -> None:
    """Clear config cache between tests."""
    clear_settings_cache()
