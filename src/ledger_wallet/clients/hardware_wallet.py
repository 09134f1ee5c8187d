"""Hardware-wallet identity proxy backed by per-device key files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ledger_wallet.core.exceptions import AccountValidationError, ServiceError
from ledger_wallet.identity import Identity
from ledger_wallet.logging import get_logger
from ledger_wallet.signing import load_private_key, principal_from_text

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ledger_wallet.models import HardwareWalletAccount


async def _auto_approve(_account: HardwareWalletAccount) -> bool:
    return True


class KeyDirectoryHardwareWalletProxy:
    """
    Resolves hardware-wallet identities from `{devices_dir}/{principal}.key`.

    Before an identity is handed out the `approve` callback is awaited; it
    stands in for the confirmation step on the physical device and may take
    as long as the user does. A refusal raises HARDWARE_WALLET_REJECTED.
    """

    def __init__(
        self,
        devices_dir: str | Path,
        approve: Callable[[HardwareWalletAccount], Awaitable[bool]] | None = None,
    ) -> None:
        self._devices_dir = Path(devices_dir)
        self._approve = approve if approve is not None else _auto_approve

    async def get_identity(self, account: HardwareWalletAccount) -> Identity:
        """
        Load the device identity for `account` once the user approves.

        Raises:
            AccountValidationError: INVALID_ACCOUNT (400) if the account principal is malformed
            ServiceError: HARDWARE_WALLET_NOT_FOUND (404) if no key exists for the device
            ServiceError: HARDWARE_WALLET_REJECTED (403) if approval is refused
            ServiceError: HARDWARE_WALLET_MISMATCH (409) if the key belongs to another principal
        """
        logger = get_logger(__name__)
        # The principal becomes a file name, so only checksummed principals get that far.
        try:
            principal_from_text(account.principal)
        except ValueError as exc:
            raise AccountValidationError(
                "Hardware wallet principal is malformed",
                {"identifier": account.identifier},
            ) from exc

        key_path = self._devices_dir / f"{account.principal}.key"

        if not key_path.exists():
            raise ServiceError(
                error="HARDWARE_WALLET_NOT_FOUND",
                message="No device key available for this hardware wallet",
                status_code=404,
                details={"identifier": account.identifier},
            )

        logger.info(
            "Waiting for hardware wallet approval",
            extra={"identifier": account.identifier, "wallet_name": account.name},
        )
        if not await self._approve(account):
            raise ServiceError(
                error="HARDWARE_WALLET_REJECTED",
                message="The request was rejected on the hardware wallet",
                status_code=403,
                details={"identifier": account.identifier},
            )

        identity = Identity(load_private_key(key_path))
        if identity.principal != account.principal:
            raise ServiceError(
                error="HARDWARE_WALLET_MISMATCH",
                message="Device key does not match the hardware wallet principal",
                status_code=409,
                details={"identifier": account.identifier},
            )
        return identity
