"""Unit tests for JSON logging setup."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest

from ledger_wallet.logging import (
    DailyRotatingFileHandler,
    JSONFormatter,
    get_logger,
    setup_logging,
)

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.unit
class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_formats_message_and_extra(self) -> None:
        record = logging.LogRecord(
            name="ledger_wallet.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Accounts synced",
            args=(),
            exc_info=None,
        )
        record.sub_accounts = 2

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "ledger_wallet.test"
        assert data["message"] == "Accounts synced"
        assert data["extra"] == {"sub_accounts": 2}

    def test_omits_empty_extra(self) -> None:
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "plain", (), None)
        assert "extra" not in json.loads(JSONFormatter().format(record))


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_only_without_directory(self) -> None:
        logger = setup_logging("debug", "ledger_wallet_test_console", None)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_adds_file_handler_with_directory(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "logs"
        logger = setup_logging("INFO", "ledger_wallet_test_file", str(log_dir))
        try:
            assert log_dir.is_dir()
            assert any(isinstance(h, DailyRotatingFileHandler) for h in logger.handlers)
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logging("VERBOSE", "ledger_wallet_test_invalid", None)

    def test_get_logger_is_named(self) -> None:
        assert get_logger("ledger_wallet.mixins").name == "ledger_wallet.mixins"
