"""Async HTTP client for the ledger service."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, NoReturn, TypeVar

import httpx
from pydantic import BaseModel

from ledger_wallet.core.exceptions import TransportError
from ledger_wallet.logging import get_logger
from ledger_wallet.models import (
    SubAccount,
    TransactionFeeResponse,
    TransferResponse,
    icp_to_e8s,
)

if TYPE_CHECKING:
    from ledger_wallet.identity import Identity
    from ledger_wallet.models import HardwareWalletAccount, MainAccount

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class LedgerClient:
    """
    Client for ICP value transfers.

    The caller resolves which identity signs for the source account; this
    client only converts the amount, signs the transfer token with that
    identity and submits it.
    """

    def __init__(
        self,
        base_url: str,
        transfer_path: str,
        transaction_fee_path: str,
        timeout_seconds: int,
    ) -> None:
        self._base_url = base_url
        self._transfer_path = transfer_path
        self._transaction_fee_path = transaction_fee_path
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
        )

    async def send_icp(
        self,
        identity: Identity,
        source_account: MainAccount | SubAccount | HardwareWalletAccount,
        destination_address: str,
        amount: Decimal | int | str,
    ) -> int:
        """
        Transfer `amount` ICP from `source_account` to `destination_address`.

        Args:
            identity: Identity that signs for the source account
            source_account: One of the session's accounts
            destination_address: Hex account identifier of the recipient
            amount: ICP amount, at most 8 decimal places

        Returns:
            Block height of the transfer

        Raises:
            TransportError: INVALID_AMOUNT (400) before any request if the amount is unusable
            TransportError: INSUFFICIENT_FUNDS (402) if the source cannot cover amount plus fee
            TransportError: FORBIDDEN (403) if the signer does not control the source
            TransportError: LEDGER_UNAVAILABLE (502) on connection/timeout/unexpected errors
        """
        try:
            amount_e8s = icp_to_e8s(amount)
        except (ValueError, ArithmeticError) as exc:
            raise TransportError(
                error="INVALID_AMOUNT",
                message=str(exc),
                status_code=400,
                details={"amount": str(amount)},
            ) from exc

        payload: dict[str, object] = {
            "action": "send_icp",
            "from": source_account.identifier,
            "to": destination_address,
            "amount_e8s": amount_e8s,
        }
        if isinstance(source_account, SubAccount):
            payload["from_sub_account"] = list(source_account.derivation_path)

        response = await self._send(
            "POST",
            self._transfer_path,
            "send ICP",
            json={"token": identity.sign_jws(payload)},
        )

        if response.status_code in (200, 201):
            return self._parse(TransferResponse, response, "send ICP").block_height

        self._raise_for_status(
            response,
            "send ICP",
            known={
                402: "INSUFFICIENT_FUNDS",
                403: "FORBIDDEN",
                404: "ACCOUNT_NOT_FOUND",
            },
        )

    async def transaction_fee(self) -> int:
        """
        Current ledger transfer fee in e8s.

        Raises:
            TransportError: LEDGER_UNAVAILABLE (502) on connection/timeout/unexpected errors
        """
        response = await self._send("GET", self._transaction_fee_path, "load transaction fee")
        if response.status_code == 200:
            return self._parse(
                TransactionFeeResponse, response, "load transaction fee"
            ).fee_e8s
        self._raise_for_status(response, "load transaction fee", known={})

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _send(self, method: str, path: str, operation: str, **kwargs: Any) -> httpx.Response:
        logger = get_logger(__name__)
        try:
            return await self._client.request(method, path, **kwargs)
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            logger.warning(
                "Ledger connection failed",
                extra={"error": str(exc), "operation": operation, "base_url": self._base_url},
            )
            raise TransportError(
                error="LEDGER_UNAVAILABLE",
                message=f"Cannot connect to ledger to {operation}",
                status_code=502,
                details={},
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Ledger HTTP error",
                extra={"error": str(exc), "operation": operation, "base_url": self._base_url},
            )
            raise TransportError(
                error="LEDGER_UNAVAILABLE",
                message=f"Ledger request to {operation} failed",
                status_code=502,
                details={},
            ) from exc

    def _parse(self, model: type[_ModelT], response: httpx.Response, operation: str) -> _ModelT:
        try:
            return model.model_validate(response.json())
        except ValueError as exc:
            get_logger(__name__).warning(
                "Ledger malformed response",
                extra={
                    "status_code": response.status_code,
                    "operation": operation,
                    "base_url": self._base_url,
                },
            )
            raise TransportError(
                error="LEDGER_UNAVAILABLE",
                message=f"Ledger sent a malformed response to {operation}",
                status_code=502,
                details={},
            ) from exc

    def _raise_for_status(
        self,
        response: httpx.Response,
        operation: str,
        known: dict[int, str],
    ) -> NoReturn:
        if response.status_code in known:
            try:
                body = response.json()
            except ValueError:
                body = None
            error_body: dict[str, Any] = body if isinstance(body, dict) else {}
            raise TransportError(
                error=error_body.get("error", known[response.status_code]),
                message=error_body.get("message", f"Ledger refused to {operation}"),
                status_code=response.status_code,
                details=error_body.get("details", {}),
            )

        get_logger(__name__).warning(
            "Ledger unexpected status",
            extra={
                "status_code": response.status_code,
                "operation": operation,
                "base_url": self._base_url,
            },
        )
        raise TransportError(
            error="LEDGER_UNAVAILABLE",
            message="Ledger returned unexpected status",
            status_code=502,
            details={},
        )
