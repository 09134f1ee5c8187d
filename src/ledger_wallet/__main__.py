"""Command-line entry point for the wallet client.

Usage::

    python -m ledger_wallet --handle alice accounts
    python -m ledger_wallet --handle alice transfer <source> <destination> 1.5
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ledger_wallet.core.exceptions import ServiceError
from ledger_wallet.factory import WalletFactory
from ledger_wallet.logging import get_logger, setup_logging
from ledger_wallet.models import TransferRequest

if TYPE_CHECKING:
    from ledger_wallet.models import TransactionsLoad
    from ledger_wallet.wallet import Wallet


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger-wallet",
        description="Inspect and manage ledger accounts for a key handle.",
    )
    parser.add_argument("--handle", required=True, help="Key handle to sign in with.")
    parser.add_argument("--config", type=Path, help="Path to config.yaml.")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("accounts", help="Sync and print all accounts.")

    transactions = commands.add_parser("transactions", help="Print an account's history.")
    transactions.add_argument("identifier")

    transfer = commands.add_parser("transfer", help="Send ICP from one of your accounts.")
    transfer.add_argument("source", help="Identifier of the source account.")
    transfer.add_argument("destination", help="Destination account identifier.")
    transfer.add_argument("amount", help="Amount in ICP, e.g. 1.25")

    create = commands.add_parser("create-subaccount", help="Create a named subaccount.")
    create.add_argument("name")

    rename = commands.add_parser("rename-subaccount", help="Rename a subaccount.")
    rename.add_argument("identifier")
    rename.add_argument("name")
    return parser


def _print(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _print_reports(wallet: Wallet) -> int:
    reports = getattr(wallet.notifier, "reports", [])
    for report in reports:
        print(f"error: {report.label_key}: {report.err or ''}", file=sys.stderr)
    return 1 if reports else 0


async def _run(args: argparse.Namespace) -> int:
    factory = WalletFactory(args.config)
    settings = factory.settings
    setup_logging(settings.logging.level, "ledger_wallet", settings.logging.directory)
    logger = get_logger("ledger_wallet.cli")

    wallet = factory.create_wallet()
    wallet.login(factory.load_identity(args.handle))
    try:
        await wallet.init_private_data()
        state = wallet.accounts_store.get()

        if args.command == "accounts":
            _print(state.model_dump(mode="json", by_alias=True))
            return 0

        if args.command == "transactions":
            loads: list[TransactionsLoad] = []
            await wallet.get_account_transactions(args.identifier, loads.append)
            if loads:
                _print(loads[-1].model_dump(mode="json", by_alias=True))
            return _print_reports(wallet)

        if args.command == "transfer":
            source = state.find(args.source)
            if source is None:
                print(f"error: unknown source account {args.source}", file=sys.stderr)
                return 2
            try:
                amount = Decimal(args.amount)
            except InvalidOperation:
                print(f"error: invalid amount {args.amount}", file=sys.stderr)
                return 2
            request = TransferRequest(
                source_account=source,
                destination_address=args.destination,
                amount=amount,
            )
            block_height = await wallet.transfer_icp(request)
            _print({"block_height": block_height})
            return 0

        if args.command == "create-subaccount":
            await wallet.add_sub_account(args.name)
            return _print_reports(wallet)

        if args.command == "rename-subaccount":
            await wallet.rename_sub_account(args.name, state.find(args.identifier))
            return _print_reports(wallet)

        logger.error("Unknown command", extra={"command": args.command})
        return 2
    except ServiceError as exc:
        print(f"error: {exc.error}: {exc.message}", file=sys.stderr)
        return 1
    finally:
        wallet.logout()
        await wallet.close()


def main() -> int:
    """Sync entry point."""
    args = _build_parser().parse_args()
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
