from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock

import httpx
import pytest

from ledger_wallet.clients.ledger_client import LedgerClient
from ledger_wallet.core.exceptions import TransportError
from ledger_wallet.signing import verify_jws

if TYPE_CHECKING:
    from ledger_wallet.identity import Identity
    from ledger_wallet.models import MainAccount, SubAccount


def _make_client(
    mock_response: httpx.Response | None = None,
    side_effect: Exception | None = None,
) -> tuple[LedgerClient, AsyncMock]:
    """Create a LedgerClient with a mock HTTP transport."""
    client = LedgerClient(
        base_url="http://mock-ledger:8011",
        transfer_path="/transfers",
        transaction_fee_path="/transaction-fee",
        timeout_seconds=5,
    )

    mock_http = AsyncMock(spec=httpx.AsyncClient)
    mock_http.request = AsyncMock(return_value=mock_response, side_effect=side_effect)
    client._client = mock_http
    return client, mock_http


def _mock_response(status_code: int, json_body: dict[str, Any]) -> httpx.Response:
    """Create a mock httpx.Response."""
    return httpx.Response(
        status_code=status_code,
        json=json_body,
        request=httpx.Request("POST", "http://mock-ledger:8011/transfers"),
    )


def _text_response(status_code: int, text: str) -> httpx.Response:
    """Create a mock httpx.Response with a non-JSON body."""
    return httpx.Response(
        status_code=status_code,
        text=text,
        request=httpx.Request("POST", "http://mock-ledger:8011/transfers"),
    )


@pytest.mark.unit
class TestSendIcp:
    """Tests for LedgerClient.send_icp."""

    async def test_returns_block_height(
        self,
        identity: Identity,
        main_account: MainAccount,
    ) -> None:
        client, mock_http = _make_client(_mock_response(201, {"block_height": 4242}))

        block_height = await client.send_icp(identity, main_account, "dest", Decimal("1.25"))

        assert block_height == 4242
        method, path = mock_http.request.await_args.args
        assert (method, path) == ("POST", "/transfers")
        token = mock_http.request.await_args.kwargs["json"]["token"]
        assert verify_jws(token, identity.public_key) == {
            "action": "send_icp",
            "from": main_account.identifier,
            "to": "dest",
            "amount_e8s": 125_000_000,
        }

    async def test_sub_account_source_carries_derivation_path(
        self,
        identity: Identity,
        sub_account: SubAccount,
    ) -> None:
        client, mock_http = _make_client(_mock_response(200, {"block_height": 1}))

        await client.send_icp(identity, sub_account, "dest", Decimal(1))

        token = mock_http.request.await_args.kwargs["json"]["token"]
        payload = verify_jws(token, identity.public_key)
        assert payload["from"] == sub_account.identifier
        assert payload["from_sub_account"] == list(sub_account.derivation_path)

    @pytest.mark.parametrize("amount", [Decimal(0), Decimal("-3"), Decimal("0.000000001")])
    async def test_invalid_amount_rejected_before_request(
        self,
        identity: Identity,
        main_account: MainAccount,
        amount: Decimal,
    ) -> None:
        client, mock_http = _make_client(_mock_response(200, {"block_height": 1}))

        with pytest.raises(TransportError) as exc_info:
            await client.send_icp(identity, main_account, "dest", amount)

        assert exc_info.value.error == "INVALID_AMOUNT"
        assert exc_info.value.status_code == 400
        mock_http.request.assert_not_awaited()

    async def test_402_raises_insufficient_funds(
        self,
        identity: Identity,
        main_account: MainAccount,
    ) -> None:
        client, _ = _make_client(
            _mock_response(402, {"error": "INSUFFICIENT_FUNDS", "message": "Balance too low"})
        )

        with pytest.raises(TransportError) as exc_info:
            await client.send_icp(identity, main_account, "dest", Decimal(1000))

        assert exc_info.value.status_code == 402
        assert exc_info.value.error == "INSUFFICIENT_FUNDS"
        assert exc_info.value.message == "Balance too low"

    async def test_403_raises_forbidden(
        self,
        identity: Identity,
        main_account: MainAccount,
    ) -> None:
        client, _ = _make_client(_mock_response(403, {}))

        with pytest.raises(TransportError) as exc_info:
            await client.send_icp(identity, main_account, "dest", Decimal(1))

        assert exc_info.value.error == "FORBIDDEN"

    async def test_500_raises_502(
        self,
        identity: Identity,
        main_account: MainAccount,
    ) -> None:
        client, _ = _make_client(_mock_response(500, {"error": "INTERNAL"}))

        with pytest.raises(TransportError) as exc_info:
            await client.send_icp(identity, main_account, "dest", Decimal(1))

        assert exc_info.value.status_code == 502
        assert exc_info.value.error == "LEDGER_UNAVAILABLE"

    async def test_success_without_block_height_raises_502(
        self,
        identity: Identity,
        main_account: MainAccount,
    ) -> None:
        client, _ = _make_client(_mock_response(201, {"height": 1}))

        with pytest.raises(TransportError) as exc_info:
            await client.send_icp(identity, main_account, "dest", Decimal(1))

        assert exc_info.value.status_code == 502
        assert exc_info.value.error == "LEDGER_UNAVAILABLE"

    async def test_success_with_non_json_body_raises_502(
        self,
        identity: Identity,
        main_account: MainAccount,
    ) -> None:
        client, _ = _make_client(_text_response(200, "<html>"))

        with pytest.raises(TransportError) as exc_info:
            await client.send_icp(identity, main_account, "dest", Decimal(1))

        assert exc_info.value.status_code == 502
        assert exc_info.value.error == "LEDGER_UNAVAILABLE"

    async def test_connect_error_raises_502(
        self,
        identity: Identity,
        main_account: MainAccount,
    ) -> None:
        client, _ = _make_client(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(TransportError) as exc_info:
            await client.send_icp(identity, main_account, "dest", Decimal(1))

        assert exc_info.value.status_code == 502
        assert exc_info.value.error == "LEDGER_UNAVAILABLE"


@pytest.mark.unit
class TestTransactionFee:
    """Tests for LedgerClient.transaction_fee."""

    async def test_returns_fee(self) -> None:
        client, mock_http = _make_client(_mock_response(200, {"fee_e8s": 10_000}))

        assert await client.transaction_fee() == 10_000
        method, path = mock_http.request.await_args.args
        assert (method, path) == ("GET", "/transaction-fee")

    async def test_unexpected_status_raises_502(self) -> None:
        client, _ = _make_client(_mock_response(503, {}))

        with pytest.raises(TransportError) as exc_info:
            await client.transaction_fee()

        assert exc_info.value.status_code == 502

    async def test_non_json_fee_body_raises_502(self) -> None:
        client, _ = _make_client(_text_response(200, "<html>"))

        with pytest.raises(TransportError) as exc_info:
            await client.transaction_fee()

        assert exc_info.value.status_code == 502
        assert exc_info.value.error == "LEDGER_UNAVAILABLE"
