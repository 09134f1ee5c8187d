"""Pydantic models for accounts, transactions and transfer requests."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

E8S_PER_ICP = 100_000_000


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class MainAccount(_Frozen):
    """The session principal's default account."""

    type: Literal["main"] = "main"
    identifier: str
    principal: str
    balance: int


class SubAccount(_Frozen):
    """A named account derived from the main principal."""

    type: Literal["subAccount"] = "subAccount"
    identifier: str
    name: str
    balance: int
    derivation_path: tuple[int, ...] = Field(alias="derivationPath")


class HardwareWalletAccount(_Frozen):
    """An account whose key lives on an external signing device."""

    type: Literal["hardwareWallet"] = "hardwareWallet"
    identifier: str
    name: str
    principal: str
    balance: int


Account = Annotated[
    MainAccount | SubAccount | HardwareWalletAccount,
    Field(discriminator="type"),
]


class AccountsState(_Frozen):
    """
    Snapshot of every account the session owns.

    Always replaced wholesale. `main` is None until the first sync and
    again after logout.
    """

    main: MainAccount | None = None
    sub_accounts: tuple[SubAccount, ...] = Field(default=(), alias="subAccounts")
    hardware_wallets: tuple[HardwareWalletAccount, ...] = Field(
        default=(), alias="hardwareWallets"
    )

    @model_validator(mode="after")
    def _identifiers_unique(self) -> AccountsState:
        identifiers = [account.identifier for account in self.accounts()]
        duplicates = sorted({i for i in identifiers if identifiers.count(i) > 1})
        if duplicates:
            msg = f"Duplicate account identifiers: {duplicates}"
            raise ValueError(msg)
        return self

    def accounts(self) -> list[MainAccount | SubAccount | HardwareWalletAccount]:
        """All accounts, main first."""
        head: list[MainAccount | SubAccount | HardwareWalletAccount] = (
            [self.main] if self.main is not None else []
        )
        return [*head, *self.sub_accounts, *self.hardware_wallets]

    def find(self, identifier: str) -> MainAccount | SubAccount | HardwareWalletAccount | None:
        """Look up an account by identifier."""
        for account in self.accounts():
            if account.identifier == identifier:
                return account
        return None


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class Timestamp(_Frozen):
    secs: int
    nanos: int


class Burn(_Frozen):
    kind: Literal["burn"] = "burn"
    amount: int


class Mint(_Frozen):
    kind: Literal["mint"] = "mint"
    amount: int


class Send(_Frozen):
    kind: Literal["send"] = "send"
    to: str
    fee: int
    amount: int


class Receive(_Frozen):
    kind: Literal["receive"] = "receive"
    from_: str = Field(alias="from")
    fee: int
    amount: int


Transfer = Annotated[Burn | Mint | Send | Receive, Field(discriminator="kind")]


class Transaction(_Frozen):
    timestamp: Timestamp
    block_height: int = Field(alias="blockHeight")
    transfer: Transfer


class GetTransactionsResponse(_Frozen):
    """One page of an account's history as returned by the accounts service."""

    total: int
    transactions: tuple[Transaction, ...]


class TransferResponse(BaseModel):
    """Ledger answer to an accepted transfer."""

    model_config = ConfigDict(frozen=True)
    block_height: int


class TransactionFeeResponse(BaseModel):
    """Current ledger transfer fee."""

    model_config = ConfigDict(frozen=True)
    fee_e8s: int


class TransactionsLoad(_Frozen):
    """Payload handed to `on_load` after each successful history read."""

    account_identifier: str
    transactions: tuple[Transaction, ...]
    certified: bool


# ---------------------------------------------------------------------------
# Transfers
# ---------------------------------------------------------------------------


class TransferRequest(_Frozen):
    """Send `amount` ICP from one of our accounts to any address."""

    source_account: Account
    destination_address: str
    amount: Decimal


def icp_to_e8s(amount: Decimal | int | str) -> int:
    """
    Convert an ICP amount to integer e8s.

    Raises:
        ValueError: if the amount is not positive or has more than 8 decimals.
    """
    value = Decimal(str(amount)) * E8S_PER_ICP
    if value <= 0:
        msg = f"Amount must be positive, got {amount}"
        raise ValueError(msg)
    if value != value.to_integral_value():
        msg = f"Amount has more precision than 1 e8s: {amount}"
        raise ValueError(msg)
    return int(value)
