"""
Wallet — client for the accounts directory and ledger services.

Composes the operation mixins (identity resolution, accounts sync and
subaccount management, transaction history, transfers) over one set of
collaborators: identity provider, accounts store, the two service clients
and the notifier.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from ledger_wallet.core.state import AccountsStore
from ledger_wallet.logging import get_logger
from ledger_wallet.mixins import (
    AccountsMixin,
    IdentityMixin,
    TransactionsMixin,
    TransferMixin,
)
from ledger_wallet.notifier import LoggingNotifier

if TYPE_CHECKING:
    from ledger_wallet.clients.accounts_client import AccountsClient
    from ledger_wallet.clients.ledger_client import LedgerClient
    from ledger_wallet.identity import Identity, SessionIdentityProvider
    from ledger_wallet.notifier import Notifier


class Wallet(IdentityMixin, AccountsMixin, TransactionsMixin, TransferMixin):
    """Account identity resolution and balance/transaction synchronization.

    The wallet owns its AccountsStore and is its only writer; UI code
    subscribes to the store to follow changes.

    Usage::

        wallet = WalletFactory().create_wallet()
        wallet.login(identity)
        await wallet.init_private_data()
        await wallet.transfer_icp(request)
    """

    def __init__(
        self,
        identity_provider: SessionIdentityProvider,
        accounts_client: AccountsClient,
        ledger_client: LedgerClient,
        accounts_store: AccountsStore | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.identity_provider = identity_provider
        self.accounts_client = accounts_client
        self.ledger_client = ledger_client
        self.accounts_store = accounts_store if accounts_store is not None else AccountsStore()
        self.notifier: Notifier = notifier if notifier is not None else LoggingNotifier()
        self.transaction_fee: int | None = None

    def login(self, identity: Identity) -> None:
        """Start a session. Accounts stay empty until the next sync."""
        self.identity_provider.login(identity)

    def logout(self) -> None:
        """End the session and clear every loaded account."""
        self.identity_provider.logout()
        self.accounts_store.reset()
        self.transaction_fee = None

    async def init_private_data(self) -> list[BaseException | None]:
        """
        Load everything a fresh session needs, concurrently.

        One failing load does not stop the other. Results are returned in
        order (accounts, fee) as None for success or the raised exception.
        """
        logger = get_logger(__name__)
        results = await asyncio.gather(
            self.sync_accounts(),
            self.load_transaction_fee(),
            return_exceptions=True,
        )

        settled: list[BaseException | None] = []
        for name, result in zip(("accounts", "transaction_fee"), results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    "Initial load failed",
                    extra={"load": name, "error": repr(result)},
                )
                settled.append(result)
            else:
                settled.append(None)
        return settled

    async def close(self) -> None:
        """Close both HTTP clients. Call this when done using the wallet."""
        await self.accounts_client.close()
        await self.ledger_client.close()

    def __repr__(self) -> str:
        identity = self.identity_provider.current_identity()
        session = f"principal={identity.principal!r}" if identity is not None else "logged_out"
        return f"Wallet({session})"
