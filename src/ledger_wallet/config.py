"""
Configuration management for the wallet client.

Loads configuration from YAML with ZERO defaults.
Every value must be explicitly specified or startup fails.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict

CONFIG_PATH_ENV_VAR = "LEDGER_WALLET_CONFIG_PATH"
DEFAULT_CONFIG_FILENAME = "config.yaml"


class ServiceConfig(BaseModel):
    """Client identity configuration."""

    model_config = ConfigDict(extra="forbid")
    name: str
    version: str


class LoggingConfig(BaseModel):
    """Logging configuration. A null directory logs to stderr only."""

    model_config = ConfigDict(extra="forbid")
    level: str
    directory: str | None


class AccountsConfig(BaseModel):
    """Accounts directory service connection configuration."""

    model_config = ConfigDict(extra="forbid")
    base_url: str
    accounts_path: str
    sub_accounts_path: str
    rename_sub_account_path: str
    transactions_path: str
    page_size: int
    timeout_seconds: int


class LedgerConfig(BaseModel):
    """Ledger service connection configuration."""

    model_config = ConfigDict(extra="forbid")
    base_url: str
    transfer_path: str
    transaction_fee_path: str
    timeout_seconds: int


class DataConfig(BaseModel):
    """Key material locations."""

    model_config = ConfigDict(extra="forbid")
    keys_dir: str
    hardware_wallet_keys_dir: str


class Settings(BaseModel):
    """
    Root configuration container.

    All fields are REQUIRED. No defaults exist.
    Missing fields cause immediate startup failure.
    """

    model_config = ConfigDict(extra="forbid")
    service: ServiceConfig
    logging: LoggingConfig
    accounts: AccountsConfig
    ledger: LedgerConfig
    data: DataConfig


def get_config_path() -> Path:
    """Resolve the config file from the env var, falling back to ./config.yaml."""
    env_value = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_value:
        return Path(env_value)
    return Path.cwd() / DEFAULT_CONFIG_FILENAME


def load_settings(config_path: Path) -> Settings:
    """
    Parse and validate a config file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a YAML mapping.
        pydantic.ValidationError: If a section or field is missing or unknown.
    """
    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)

    raw = yaml.safe_load(config_path.read_text())
    if not isinstance(raw, dict):
        msg = f"Invalid config file: {config_path}"
        raise ValueError(msg)

    settings = Settings(**raw)
    return _resolve_relative_paths(settings, config_path.parent)


def _resolve_relative_paths(settings: Settings, base_dir: Path) -> Settings:
    """Make data and log directories absolute relative to the config file."""

    def resolve(value: str) -> str:
        path = Path(value)
        if not path.is_absolute():
            path = base_dir / path
        return str(path.resolve())

    data = settings.data.model_copy(
        update={
            "keys_dir": resolve(settings.data.keys_dir),
            "hardware_wallet_keys_dir": resolve(settings.data.hardware_wallet_keys_dir),
        }
    )
    log_directory = settings.logging.directory
    logging_config = settings.logging.model_copy(
        update={"directory": resolve(log_directory) if log_directory else None}
    )
    return settings.model_copy(update={"data": data, "logging": logging_config})


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from the resolved config path, once per process."""
    return load_settings(get_config_path())


def clear_settings_cache() -> None:
    """Forget cached settings. Used in testing."""
    get_settings.cache_clear()
