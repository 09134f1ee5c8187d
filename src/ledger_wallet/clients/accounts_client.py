"""Async HTTP client for the accounts directory service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import BaseModel

from ledger_wallet.core.exceptions import TransportError
from ledger_wallet.logging import get_logger
from ledger_wallet.models import AccountsState, GetTransactionsResponse, Transaction

if TYPE_CHECKING:
    from ledger_wallet.identity import Identity
    from ledger_wallet.models import SubAccount

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class AccountsClient:
    """
    Client for the accounts directory: the session's main account, its
    named subaccounts, attached hardware wallets and per-account history.

    Reads authenticate with a signed Authorization header; mutations send
    a signed token in the body. History reads can be issued uncertified
    (fast) or certified (verified by the service before it answers).
    """

    def __init__(
        self,
        base_url: str,
        accounts_path: str,
        sub_accounts_path: str,
        rename_sub_account_path: str,
        transactions_path: str,
        page_size: int,
        timeout_seconds: int,
    ) -> None:
        self._base_url = base_url
        self._accounts_path = accounts_path
        self._sub_accounts_path = sub_accounts_path
        self._rename_sub_account_path = rename_sub_account_path
        self._transactions_path = transactions_path
        self._page_size = page_size
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
        )

    async def load_accounts(self, identity: Identity) -> AccountsState:
        """
        Load every account of the session principal.

        Returns:
            A complete AccountsState snapshot

        Raises:
            TransportError: ACCOUNT_NOT_FOUND (404) if the principal has no account
            TransportError: FORBIDDEN (403) if authorization failed
            TransportError: ACCOUNTS_SERVICE_UNAVAILABLE (502) on connection/timeout/unexpected errors
        """
        headers = identity.auth_header({"action": "load_accounts", "principal": identity.principal})
        response = await self._send("GET", self._accounts_path, "load accounts", headers=headers)
        self._check_status(response, "load accounts", expected=200)
        return self._parse(AccountsState, response, "load accounts")

    async def create_sub_account(self, identity: Identity, name: str) -> None:
        """
        Create a named subaccount under the session principal.

        Raises:
            TransportError: ACCOUNT_NOT_FOUND (404) if the principal has no account
            TransportError: SUB_ACCOUNT_LIMIT_EXCEEDED (409) if no more subaccounts are allowed
            TransportError: ACCOUNTS_SERVICE_UNAVAILABLE (502) on connection/timeout/unexpected errors
        """
        token = identity.sign_jws({"action": "create_sub_account", "name": name})
        response = await self._send(
            "POST",
            self._sub_accounts_path,
            "create subaccount",
            json={"token": token},
        )
        self._check_status(
            response,
            "create subaccount",
            expected=201,
            known={
                404: "ACCOUNT_NOT_FOUND",
                409: "SUB_ACCOUNT_LIMIT_EXCEEDED",
                422: "SUB_ACCOUNT_LIMIT_EXCEEDED",
            },
        )

    async def rename_sub_account(
        self,
        identity: Identity,
        account: SubAccount,
        new_name: str,
    ) -> None:
        """
        Rename one of the session principal's subaccounts.

        Raises:
            TransportError: SUB_ACCOUNT_NOT_FOUND (404) if the subaccount is unknown
            TransportError: ACCOUNTS_SERVICE_UNAVAILABLE (502) on connection/timeout/unexpected errors
        """
        token = identity.sign_jws(
            {
                "action": "rename_sub_account",
                "identifier": account.identifier,
                "new_name": new_name,
            }
        )
        path = self._rename_sub_account_path.format(identifier=account.identifier)
        response = await self._send("PUT", path, "rename subaccount", json={"token": token})
        self._check_status(
            response,
            "rename subaccount",
            expected=200,
            known={404: "SUB_ACCOUNT_NOT_FOUND"},
        )

    async def get_transactions(
        self,
        identity: Identity,
        account_identifier: str,
        certified: bool,
        page_size: int | None = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """
        Fetch one page of an account's transaction history, newest first.

        Args:
            identity: Identity used to authenticate the read
            account_identifier: Account whose history is requested
            certified: Ask the service for a certified (verified) response
            page_size: Page size, defaults to the configured one
            offset: Number of most recent transactions to skip

        Raises:
            TransportError: ACCOUNT_NOT_FOUND (404) if the account is unknown
            TransportError: ACCOUNTS_SERVICE_UNAVAILABLE (502) on connection/timeout/unexpected errors
        """
        headers = identity.auth_header(
            {"action": "get_transactions", "account_identifier": account_identifier}
        )
        path = self._transactions_path.format(identifier=account_identifier)
        response = await self._send(
            "GET",
            path,
            "get transactions",
            headers=headers,
            params={
                "certified": "true" if certified else "false",
                "page_size": page_size if page_size is not None else self._page_size,
                "offset": offset,
            },
        )
        self._check_status(response, "get transactions", expected=200)
        page = self._parse(GetTransactionsResponse, response, "get transactions")
        return list(page.transactions)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _send(self, method: str, path: str, operation: str, **kwargs: Any) -> httpx.Response:
        logger = get_logger(__name__)
        try:
            return await self._client.request(method, path, **kwargs)
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            logger.warning(
                "Accounts service connection failed",
                extra={"error": str(exc), "operation": operation, "base_url": self._base_url},
            )
            raise TransportError(
                error="ACCOUNTS_SERVICE_UNAVAILABLE",
                message=f"Cannot connect to accounts service to {operation}",
                status_code=502,
                details={},
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Accounts service HTTP error",
                extra={"error": str(exc), "operation": operation, "base_url": self._base_url},
            )
            raise TransportError(
                error="ACCOUNTS_SERVICE_UNAVAILABLE",
                message=f"Accounts service request to {operation} failed",
                status_code=502,
                details={},
            ) from exc

    def _check_status(
        self,
        response: httpx.Response,
        operation: str,
        expected: int,
        known: dict[int, str] | None = None,
    ) -> None:
        if response.status_code == expected:
            return

        codes = {403: "FORBIDDEN", 404: "ACCOUNT_NOT_FOUND", **(known or {})}
        if response.status_code in codes:
            error_body = _json_or_empty(response)
            raise TransportError(
                error=error_body.get("error", codes[response.status_code]),
                message=error_body.get("message", f"Accounts service refused to {operation}"),
                status_code=response.status_code,
                details=error_body.get("details", {}),
            )

        get_logger(__name__).warning(
            "Accounts service unexpected status",
            extra={
                "status_code": response.status_code,
                "operation": operation,
                "base_url": self._base_url,
            },
        )
        raise TransportError(
            error="ACCOUNTS_SERVICE_UNAVAILABLE",
            message="Accounts service returned unexpected status",
            status_code=502,
            details={},
        )

    def _parse(
        self,
        model: type[_ModelT],
        response: httpx.Response,
        operation: str,
    ) -> _ModelT:
        try:
            return model.model_validate(response.json())
        except ValueError as exc:
            raise TransportError(
                error="ACCOUNTS_SERVICE_UNAVAILABLE",
                message=f"Accounts service sent a malformed response to {operation}",
                status_code=502,
                details={},
            ) from exc


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
