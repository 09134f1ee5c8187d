from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest

from ledger_wallet.clients.hardware_wallet import KeyDirectoryHardwareWalletProxy
from ledger_wallet.core.exceptions import AccountValidationError, ServiceError
from ledger_wallet.identity import Identity
from ledger_wallet.models import HardwareWalletAccount
from ledger_wallet.signing import generate_keypair

if TYPE_CHECKING:
    from pathlib import Path


def _device_account(devices_dir: Path, handle: str = "device") -> HardwareWalletAccount:
    """Generate a device key and return a matching account, keyed by principal."""
    private_key, _ = generate_keypair(handle, devices_dir)
    identity = Identity(private_key)
    (devices_dir / f"{handle}.key").rename(devices_dir / f"{identity.principal}.key")
    return HardwareWalletAccount(
        identifier=identity.account_identifier(),
        name="nano",
        principal=identity.principal,
        balance=0,
    )


@pytest.mark.unit
class TestKeyDirectoryHardwareWalletProxy:
    """Tests for the key-directory device proxy."""

    async def test_returns_device_identity(self, tmp_path: Path) -> None:
        account = _device_account(tmp_path)
        proxy = KeyDirectoryHardwareWalletProxy(tmp_path)

        identity = await proxy.get_identity(account)

        assert identity.principal == account.principal

    async def test_waits_for_approval(self, tmp_path: Path) -> None:
        account = _device_account(tmp_path)
        approve = AsyncMock(return_value=True)
        proxy = KeyDirectoryHardwareWalletProxy(tmp_path, approve=approve)

        await proxy.get_identity(account)

        approve.assert_awaited_once_with(account)

    async def test_rejected_on_device(self, tmp_path: Path) -> None:
        account = _device_account(tmp_path)
        proxy = KeyDirectoryHardwareWalletProxy(tmp_path, approve=AsyncMock(return_value=False))

        with pytest.raises(ServiceError) as exc_info:
            await proxy.get_identity(account)

        assert exc_info.value.error == "HARDWARE_WALLET_REJECTED"
        assert exc_info.value.status_code == 403

    async def test_missing_key(
        self,
        tmp_path: Path,
        hardware_wallet_account: HardwareWalletAccount,
    ) -> None:
        approve = AsyncMock(return_value=True)
        proxy = KeyDirectoryHardwareWalletProxy(tmp_path, approve=approve)

        with pytest.raises(ServiceError) as exc_info:
            await proxy.get_identity(hardware_wallet_account)

        assert exc_info.value.error == "HARDWARE_WALLET_NOT_FOUND"
        assert exc_info.value.status_code == 404
        approve.assert_not_awaited()

    async def test_key_for_other_principal(self, tmp_path: Path) -> None:
        account = _device_account(tmp_path)
        other_key, _ = generate_keypair("other", tmp_path)
        (tmp_path / "other.key").replace(tmp_path / f"{account.principal}.key")
        assert Identity(other_key).principal != account.principal
        proxy = KeyDirectoryHardwareWalletProxy(tmp_path)

        with pytest.raises(ServiceError) as exc_info:
            await proxy.get_identity(account)

        assert exc_info.value.error == "HARDWARE_WALLET_MISMATCH"
        assert exc_info.value.status_code == 409

    async def test_malformed_principal_rejected_before_approval(self, tmp_path: Path) -> None:
        account = HardwareWalletAccount(
            identifier="hw-bad",
            name="nano",
            principal="../../main",
            balance=0,
        )
        approve = AsyncMock(return_value=True)
        proxy = KeyDirectoryHardwareWalletProxy(tmp_path, approve=approve)

        with pytest.raises(AccountValidationError) as exc_info:
            await proxy.get_identity(account)

        assert exc_info.value.error == "INVALID_ACCOUNT"
        assert exc_info.value.status_code == 400
        assert exc_info.value.details == {"identifier": "hw-bad"}
        approve.assert_not_awaited()
