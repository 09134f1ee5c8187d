"""Session identity and the identity provider consulted by every wallet operation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ledger_wallet.core.exceptions import MissingIdentityError
from ledger_wallet.logging import get_logger
from ledger_wallet.signing import (
    account_identifier,
    create_jws,
    principal_from_public_key,
    principal_to_text,
)

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.ed25519 import (
        Ed25519PrivateKey,
        Ed25519PublicKey,
    )

    from ledger_wallet.models import HardwareWalletAccount


class Identity:
    """An Ed25519 signing capability bound to a principal."""

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._private_key = private_key
        self.public_key: Ed25519PublicKey = private_key.public_key()
        self._principal = principal_from_public_key(self.public_key)
        self.principal = principal_to_text(self._principal)

    def account_identifier(self, subaccount: bytes | None = None) -> str:
        """Account identifier of this principal's default or given subaccount."""
        return account_identifier(self._principal, subaccount)

    def sign_jws(self, payload: dict[str, object]) -> str:
        """Sign `payload` as a compact JWS with this principal as key id."""
        return create_jws(payload, self._private_key, kid=self.principal)

    def auth_header(self, payload: dict[str, object]) -> dict[str, str]:
        """Authorization header carrying a signed JWS token."""
        return {"Authorization": f"Bearer {self.sign_jws(payload)}"}

    def __repr__(self) -> str:
        return f"Identity(principal={self.principal!r})"


class HardwareWalletProxy(Protocol):
    """Obtains a device-backed identity; may wait for the user to approve on the device."""

    async def get_identity(self, account: HardwareWalletAccount) -> Identity: ...


class SessionIdentityProvider:
    """
    Holds the identity of the logged-in session.

    Main and subaccounts sign with the session identity; hardware-wallet
    accounts sign through the device proxy and never with the session key.
    """

    def __init__(self, hardware_wallet_proxy: HardwareWalletProxy) -> None:
        self._identity: Identity | None = None
        self._hardware_wallet_proxy = hardware_wallet_proxy

    def login(self, identity: Identity) -> None:
        self._identity = identity
        get_logger(__name__).info("Session started", extra={"principal": identity.principal})

    def logout(self) -> None:
        self._identity = None
        get_logger(__name__).info("Session ended")

    def current_identity(self) -> Identity | None:
        return self._identity

    def require_identity(self) -> Identity:
        """
        Return the session identity.

        Raises:
            MissingIdentityError: If no session is active.
        """
        if self._identity is None:
            raise MissingIdentityError()
        return self._identity

    async def hardware_wallet_identity(self, account: HardwareWalletAccount) -> Identity:
        """Ask the device proxy for the identity of a hardware-wallet account."""
        return await self._hardware_wallet_proxy.get_identity(account)
