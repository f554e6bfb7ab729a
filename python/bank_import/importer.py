"""
CSV Importer Module

Imports one transaction file row by row: validate, classify, handle with
retries, and write the file's direct debit batch when every row succeeded.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .batch_document import BatchFile, DirectDebitBatch, batch_file_path
from .classification import classify_row, validate_row
from .config import ImportConfig
from .handlers import TransactionHandlers
from .retry import run_with_retry
from .rows import read_import_rows
from .store import AccountStore

logger = logging.getLogger(__name__)

# Success marker used when the file could not be processed at all
DATA_LOST = "data lost"


@dataclass
class ImportOutcome:
    """Result of importing one file."""

    file: str
    success: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    batch_file: BatchFile | None = None

    @property
    def succeeded(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "success": list(self.success),
            "errors": list(self.errors),
            "batch_file": str(self.batch_file.path) if self.batch_file else None,
            "succeeded": self.succeeded
        }


class CsvImporter:
    """Imports transaction files into the account store."""

    def __init__(self, store: AccountStore, config: ImportConfig):
        """Initialize importer.

        Args:
            store: Account and transfer store
            config: Import configuration
        """
        self.store = store
        self.config = config
        self.handlers = TransactionHandlers(store, config)

    def import_file(self, file_path: Path | str, validation_only: bool = False) -> ImportOutcome:
        """Import a file, never raising.

        Row failures stop the import and are listed in the outcome. Any other
        failure, such as an unreadable file, is reported as a single error.

        Args:
            file_path: Path to the import file
            validation_only: Run every check without persisting or writing the batch

        Returns:
            ImportOutcome
        """
        try:
            return self._import_rows(Path(file_path), validation_only)
        except Exception as e:
            logger.exception(f"Import of {file_path} aborted")
            return ImportOutcome(file=str(file_path), success=[DATA_LOST], errors=[str(e)])

    def _import_rows(self, file_path: Path, validation_only: bool) -> ImportOutcome:
        outcome = ImportOutcome(file=str(file_path))
        batch = DirectDebitBatch.from_config(self.config)

        rows = read_import_rows(file_path, self.config.delimiter, self.config.encoding)
        logger.info(f"Importing {len(rows)} rows from {file_path} (validation_only={validation_only})")

        for row in rows:
            is_valid, error = validate_row(row, self.config)
            if not is_valid:
                outcome.errors.append(error)
                break

            if not row.activity_id:
                continue

            kind = classify_row(row, self.config)
            result = run_with_retry(
                row,
                lambda: self.handlers.handle(kind, row, batch, validation_only),
                self.config.retry_attempts
            )
            if not result.success:
                outcome.errors.append(result.error)
                break

            outcome.success.append(row.activity_id)

        if outcome.succeeded and not validation_only and not batch.is_empty():
            outcome.batch_file = batch.write(batch_file_path(self.config))

        return outcome
