"""Transfer mixin — ICP transfers and the ledger fee."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ledger_wallet.logging import get_logger

if TYPE_CHECKING:
    from ledger_wallet.clients.ledger_client import LedgerClient
    from ledger_wallet.identity import Identity
    from ledger_wallet.models import TransferRequest


class _TransferHost(Protocol):
    ledger_client: LedgerClient
    transaction_fee: int | None

    async def get_account_identity(self, account_identifier: str) -> Identity: ...

    async def sync_accounts(self) -> None: ...


class TransferMixin:
    """Value transfers through the ledger."""

    async def transfer_icp(self: _TransferHost, request: TransferRequest) -> int:
        """
        Send ICP from one of our accounts, then resync all balances.

        Balances are never adjusted locally; the resync is the only way the
        new balances reach the store. Errors are not caught here.

        Returns:
            Block height of the transfer.

        Raises:
            MissingIdentityError: If no session is active.
            ServiceError: If identity resolution, the transfer or the resync fails.
        """
        source = request.source_account
        identity = await self.get_account_identity(source.identifier)
        block_height = await self.ledger_client.send_icp(
            identity,
            source,
            request.destination_address,
            request.amount,
        )
        get_logger(__name__).info(
            "Transfer submitted",
            extra={
                "from": source.identifier,
                "to": request.destination_address,
                "amount": str(request.amount),
                "block_height": block_height,
            },
        )
        await self.sync_accounts()
        return block_height

    async def load_transaction_fee(self: _TransferHost) -> int:
        """Fetch the current ledger fee (e8s) and keep it on the wallet."""
        fee = await self.ledger_client.transaction_fee()
        self.transaction_fee = fee
        return fee
