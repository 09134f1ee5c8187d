"""Transactions mixin — progressive uncertified-then-certified history reads."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Protocol

from ledger_wallet.core.exceptions import ServiceError
from ledger_wallet.logging import get_logger
from ledger_wallet.models import TransactionsLoad
from ledger_wallet.notifier import TRANSACTIONS_NOT_FOUND

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ledger_wallet.clients.accounts_client import AccountsClient
    from ledger_wallet.identity import SessionIdentityProvider
    from ledger_wallet.notifier import Notifier

    OnTransactionsLoad = Callable[[TransactionsLoad], Awaitable[None] | None]


class _TransactionsHost(Protocol):
    identity_provider: SessionIdentityProvider
    accounts_client: AccountsClient
    notifier: Notifier


class TransactionsMixin:
    """History reads for a single account."""

    async def get_account_transactions(
        self: _TransactionsHost,
        account_identifier: str,
        on_load: OnTransactionsLoad,
    ) -> None:
        """
        Read an account's history twice: uncertified, then certified.

        Both reads are always issued, one after the other. Each success
        calls `on_load` with its own result, so a caller can render the
        fast answer first and replace it with the verified one. Each
        failure is reported once and skips `on_load` for that read only.

        Raises:
            MissingIdentityError: If no session is active (before any read).
        """
        identity = self.identity_provider.require_identity()
        logger = get_logger(__name__)

        for certified in (False, True):
            try:
                transactions = await self.accounts_client.get_transactions(
                    identity, account_identifier, certified
                )
            except ServiceError as err:
                logger.warning(
                    "Transaction history read failed",
                    extra={
                        "identifier": account_identifier,
                        "certified": certified,
                        "error_code": err.error,
                    },
                )
                self.notifier.report_error(label_key=TRANSACTIONS_NOT_FOUND, err=err)
                continue

            result = on_load(
                TransactionsLoad(
                    account_identifier=account_identifier,
                    transactions=tuple(transactions),
                    certified=certified,
                )
            )
            if inspect.isawaitable(result):
                await result
