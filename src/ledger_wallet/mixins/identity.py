"""Identity resolution — which identity signs for a given account."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, assert_never

from ledger_wallet.logging import get_logger
from ledger_wallet.models import HardwareWalletAccount, MainAccount, SubAccount

if TYPE_CHECKING:
    from ledger_wallet.core.state import AccountsStore
    from ledger_wallet.identity import Identity, SessionIdentityProvider


class _IdentityHost(Protocol):
    identity_provider: SessionIdentityProvider
    accounts_store: AccountsStore

    async def _identity_for(
        self, account: MainAccount | SubAccount | HardwareWalletAccount
    ) -> Identity: ...


class IdentityMixin:
    """Resolves signing identities across main, sub and hardware-wallet accounts."""

    async def get_account_identity(self: _IdentityHost, account_identifier: str) -> Identity:
        """
        Identity that signs for the account with this identifier.

        Main and subaccounts resolve to the session identity; hardware
        wallets go through the device proxy. An identifier that is not
        one of ours also resolves to the session identity.

        Raises:
            MissingIdentityError: If no session is active.
        """
        session_identity = self.identity_provider.require_identity()

        account = self.accounts_store.get().find(account_identifier)
        if account is None:
            get_logger(__name__).debug(
                "Identifier not among loaded accounts, using session identity",
                extra={"identifier": account_identifier},
            )
            return session_identity

        return await self._identity_for(account)

    async def get_account_identity_by_principal(
        self: _IdentityHost,
        principal: str,
    ) -> Identity | None:
        """
        Identity for one of our accounts, keyed by principal.

        Subaccounts share the main principal, so they match through it.

        Returns:
            The identity, or None if the principal belongs to none of our accounts.

        Raises:
            MissingIdentityError: If no session is active.
        """
        self.identity_provider.require_identity()

        state = self.accounts_store.get()
        if state.main is not None and state.main.principal == principal:
            return await self._identity_for(state.main)

        for wallet in state.hardware_wallets:
            if wallet.principal == principal:
                return await self._identity_for(wallet)

        return None

    async def _identity_for(
        self: _IdentityHost,
        account: MainAccount | SubAccount | HardwareWalletAccount,
    ) -> Identity:
        match account:
            case MainAccount() | SubAccount():
                return self.identity_provider.require_identity()
            case HardwareWalletAccount():
                return await self.identity_provider.hardware_wallet_identity(account)
            case _:
                assert_never(account)
