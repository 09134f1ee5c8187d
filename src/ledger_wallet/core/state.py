"""Observable holder for the session's accounts snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledger_wallet.logging import get_logger
from ledger_wallet.models import AccountsState

if TYPE_CHECKING:
    from collections.abc import Callable


class AccountsStore:
    """
    Holds the current AccountsState.

    The state is an immutable snapshot and every write swaps the whole
    object in one assignment, so a reader never sees accounts from two
    different server responses. Readers subscribe instead of holding the
    store; the wallet that owns the store is the only writer.
    """

    def __init__(self, initial: AccountsState | None = None) -> None:
        self._state = initial if initial is not None else AccountsState()
        self._subscribers: dict[int, Callable[[AccountsState], None]] = {}
        self._next_token = 0

    def get(self) -> AccountsState:
        """Return the current snapshot."""
        return self._state

    def set(self, state: AccountsState) -> None:
        """Replace the snapshot and notify subscribers in registration order."""
        self._state = state
        logger = get_logger(__name__)
        for callback in list(self._subscribers.values()):
            try:
                callback(state)
            except Exception:
                logger.exception("Accounts subscriber failed")

    def reset(self) -> None:
        """Return to the empty pre-login state."""
        self.set(AccountsState())

    def subscribe(self, callback: Callable[[AccountsState], None]) -> Callable[[], None]:
        """
        Register a reader.

        The callback receives the current snapshot immediately and then
        every later one.

        Returns:
            A function that removes the subscription.
        """
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback
        callback(self._state)

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe
