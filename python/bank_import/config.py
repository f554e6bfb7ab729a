"""
Import Configuration Module

Loads the CSV import settings from config/csv_import.yaml.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE = "csv_import.yaml"
NOTIFICATION_CHANNELS = ("audit_log", "log")


@dataclass
class TransportConfig:
    """Remote share connection settings."""

    address: str = "0.0.0.0:2020"
    mount_point: str = "/mnt/csv_share"
    remote_dir: str = "/data/files/csv"
    quarantine_dir: str = "/data/files/batch_processed"


@dataclass
class CreditorConfig:
    """Creditor identity written into every direct debit batch."""

    kind: str = "RS"
    account_number: str = "8888888888"
    bank_code: str = "99999999"
    name: str = "Credit collection"


@dataclass
class ImportConfig:
    """Settings for classifying, importing and settling CSV files."""

    delimiter: str = ";"
    encoding: str = "utf-8"
    file_extension: str = ".csv"
    ready_marker_suffix: str = ".start"

    # Classification codes
    internal_bank_code: str = "00000000"
    collector_bank_code: str = "70022200"
    standard_subtype: str = "10"
    collection_subtype: str = "16"
    allowed_subtypes: tuple[str, ...] = ("10", "16")

    retry_attempts: int = 5

    base_dir: Path = field(default_factory=Path.cwd)
    download_dir: str = "private/data/download"
    error_dir: str = "private/data/upload"
    batch_dir: str = "private/upload/csv/tmp_mraba"
    batch_prefix: str = "DTAUS"
    batch_suffix: str = "_201_mraba.csv"
    batch_timestamp_format: str = "%Y%m%d_%H%M%S"

    notifications_enabled: bool = True
    # "audit_log" queues feedback for the mail workflow, "log" only logs it
    notification_channel: str = "audit_log"

    transport: TransportConfig = field(default_factory=TransportConfig)
    creditor: CreditorConfig = field(default_factory=CreditorConfig)

    def __post_init__(self):
        self.base_dir = Path(self.base_dir)
        self.allowed_subtypes = tuple(str(code) for code in self.allowed_subtypes)
        self.validate()

    def validate(self) -> None:
        """Check the settings for values the importer cannot work with.

        Raises:
            ConfigurationError: If a setting is unusable
        """
        if not self.delimiter or len(self.delimiter) != 1:
            raise ConfigurationError(f"Delimiter must be a single character, got {self.delimiter!r}")
        if self.delimiter == ",":
            raise ConfigurationError("Import files use a secondary delimiter, comma is not allowed")
        if self.retry_attempts < 1:
            raise ConfigurationError(f"retry_attempts must be positive, got {self.retry_attempts}")
        if not self.allowed_subtypes:
            raise ConfigurationError("At least one allowed subtype code is required")
        if self.notification_channel not in NOTIFICATION_CHANNELS:
            raise ConfigurationError(
                f"notification_channel must be one of {', '.join(NOTIFICATION_CHANNELS)}, got {self.notification_channel!r}"
            )

    @property
    def download_path(self) -> Path:
        return self.base_dir / self.download_dir

    @property
    def error_path(self) -> Path:
        return self.base_dir / self.error_dir

    @property
    def batch_path(self) -> Path:
        return self.base_dir / self.batch_dir


def _section(data: dict, name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Section '{name}' must be a mapping")
    return value


def _code(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{name} must be quoted in the config file, got {value!r}")
    return value


def load_config(
    config_dir: Path | str | None = None,
    base_dir: Path | str | None = None
) -> ImportConfig:
    """Load import configuration.

    Args:
        config_dir: Path to configuration directory
        base_dir: Root for the relative local directories (defaults to cwd)

    Returns:
        ImportConfig, with defaults for anything not in the file
    """
    config_dir = Path(config_dir) if config_dir else Path(__file__).parent.parent.parent / "config"
    config_file = config_dir / CONFIG_FILE

    if config_file.exists():
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
    else:
        logger.info(f"No {CONFIG_FILE} in {config_dir}, using defaults")
        data = {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_file} must contain a mapping")

    settings = {k: v for k, v in data.items() if k not in ("transport", "creditor", "classification")}

    # Codes are compared as strings and must be quoted; YAML reads 00000000 as 0
    classification = _section(data, "classification")
    for key, value in classification.items():
        if key == "allowed_subtypes":
            settings[key] = [_code(f"classification.{key}", v) for v in value or []]
        else:
            settings[key] = _code(f"classification.{key}", value)

    creditor = {k: _code(f"creditor.{k}", v) for k, v in _section(data, "creditor").items()}
    configured_base = settings.pop("base_dir", None)

    try:
        return ImportConfig(
            base_dir=Path(base_dir or configured_base or Path.cwd()),
            transport=TransportConfig(**_section(data, "transport")),
            creditor=CreditorConfig(**creditor),
            **settings
        )
    except TypeError as e:
        raise ConfigurationError(f"Invalid setting in {config_file}: {e}") from e
