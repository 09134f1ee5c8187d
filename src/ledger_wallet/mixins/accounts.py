"""Accounts mixin — full resync and subaccount create/rename."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ledger_wallet.core.exceptions import AccountValidationError, ServiceError
from ledger_wallet.logging import get_logger
from ledger_wallet.models import SubAccount
from ledger_wallet.notifier import (
    CREATE_SUBACCOUNT_FAILED,
    RENAME_SUBACCOUNT_FAILED,
    RENAME_SUBACCOUNT_NO_ACCOUNT,
    RENAME_SUBACCOUNT_TYPE,
)

if TYPE_CHECKING:
    from ledger_wallet.clients.accounts_client import AccountsClient
    from ledger_wallet.core.state import AccountsStore
    from ledger_wallet.identity import SessionIdentityProvider
    from ledger_wallet.models import HardwareWalletAccount, MainAccount
    from ledger_wallet.notifier import Notifier


class _AccountsHost(Protocol):
    identity_provider: SessionIdentityProvider
    accounts_store: AccountsStore
    accounts_client: AccountsClient
    notifier: Notifier

    async def sync_accounts(self) -> None: ...


class AccountsMixin:
    """Methods that load or change the set of accounts."""

    async def sync_accounts(self: _AccountsHost) -> None:
        """
        Reload every account and replace the stored snapshot in one write.

        Raises:
            MissingIdentityError: If no session is active.
            TransportError: If the accounts service call fails.
        """
        identity = self.identity_provider.require_identity()
        accounts = await self.accounts_client.load_accounts(identity)
        self.accounts_store.set(accounts)
        get_logger(__name__).info(
            "Accounts synced",
            extra={
                "sub_accounts": len(accounts.sub_accounts),
                "hardware_wallets": len(accounts.hardware_wallets),
            },
        )

    async def add_sub_account(self: _AccountsHost, name: str) -> None:
        """
        Create a subaccount and resync.

        Failures, including a missing session, are reported through the
        notifier rather than raised.
        """
        try:
            identity = self.identity_provider.require_identity()
            await self.accounts_client.create_sub_account(identity, name)
            await self.sync_accounts()
        except ServiceError as err:
            self.notifier.report_error(label_key=CREATE_SUBACCOUNT_FAILED, err=err)

    async def rename_sub_account(
        self: _AccountsHost,
        new_name: str,
        selected_account: MainAccount | SubAccount | HardwareWalletAccount | None,
    ) -> None:
        """
        Rename a subaccount and resync.

        Preconditions are checked in order (session, account given,
        account is a subaccount); the first one that fails is reported
        and nothing is sent. Call failures are reported, not raised.
        """
        try:
            identity = self.identity_provider.require_identity()
        except ServiceError as err:
            self.notifier.report_error(label_key=RENAME_SUBACCOUNT_FAILED, err=err)
            return

        if selected_account is None:
            self.notifier.report_error(
                label_key=RENAME_SUBACCOUNT_NO_ACCOUNT,
                err=AccountValidationError("No account selected for rename"),
            )
            return

        if not isinstance(selected_account, SubAccount):
            self.notifier.report_error(
                label_key=RENAME_SUBACCOUNT_TYPE,
                err=AccountValidationError(
                    "Only subaccounts can be renamed",
                    {"identifier": selected_account.identifier, "type": selected_account.type},
                ),
            )
            return

        try:
            await self.accounts_client.rename_sub_account(identity, selected_account, new_name)
            await self.sync_accounts()
        except ServiceError as err:
            self.notifier.report_error(label_key=RENAME_SUBACCOUNT_FAILED, err=err)
