"""User-facing error reporting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ledger_wallet.core.exceptions import ServiceError
from ledger_wallet.logging import get_logger

TRANSACTIONS_NOT_FOUND = "error.transactions_not_found"
CREATE_SUBACCOUNT_FAILED = "error__account.create_subaccount"
RENAME_SUBACCOUNT_FAILED = "error.rename_subaccount"
RENAME_SUBACCOUNT_NO_ACCOUNT = "error.rename_subaccount_no_account"
RENAME_SUBACCOUNT_TYPE = "error.rename_subaccount_type"


class Notifier(Protocol):
    """Fire-and-forget sink for errors the user should see."""

    def report_error(self, *, label_key: str, err: BaseException | None = None) -> None: ...


@dataclass(frozen=True)
class ErrorReport:
    """One reported error: a localizable label plus the underlying cause, if any."""

    label_key: str
    err: BaseException | None = None


class LoggingNotifier:
    """
    Notifier that logs every report and keeps the latest ones for display.

    At most `max_reports` are retained; older reports are dropped first.
    Every report is still logged. Call `clear()` once reports are shown.
    """

    def __init__(self, max_reports: int = 100) -> None:
        if max_reports < 1:
            msg = f"max_reports must be at least 1, got {max_reports}"
            raise ValueError(msg)
        self._max_reports = max_reports
        self.reports: list[ErrorReport] = []

    def report_error(self, *, label_key: str, err: BaseException | None = None) -> None:
        self.reports.append(ErrorReport(label_key=label_key, err=err))
        if len(self.reports) > self._max_reports:
            del self.reports[: len(self.reports) - self._max_reports]

        extra: dict[str, object] = {"label_key": label_key}
        if isinstance(err, ServiceError):
            extra["error_code"] = err.error
            extra["status_code"] = err.status_code
        elif err is not None:
            extra["error"] = repr(err)
        get_logger(__name__).warning("Error reported to user", extra=extra)

    def clear(self) -> None:
        self.reports.clear()
