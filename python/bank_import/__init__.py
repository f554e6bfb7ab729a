"""
Bank Import Module

Imports delimited transaction files into accounts and transfers, retries
failing rows, and writes direct debit settlement batches.
"""

from .config import ImportConfig, load_config
from .classification import TransactionKind, classify, classify_row, validate_row
from .batch_document import DirectDebitBatch, DirectDebitEntry, BatchFile
from .handlers import TransactionHandlers, transliterate_holder
from .importer import CsvImporter, ImportOutcome
from .orchestrator import ImportOrchestrator, FileRunResult
from .report import format_import_result, report_import_result, build_feedback
from .retry import run_with_retry, RetryOutcome
from .rows import ImportRow, parse_rows, read_import_rows

__all__ = [
    # Configuration
    "ImportConfig",
    "load_config",
    # Rows and classification
    "ImportRow",
    "parse_rows",
    "read_import_rows",
    "TransactionKind",
    "classify",
    "classify_row",
    "validate_row",
    # Processing
    "TransactionHandlers",
    "transliterate_holder",
    "run_with_retry",
    "RetryOutcome",
    "CsvImporter",
    "ImportOutcome",
    # Settlement
    "DirectDebitBatch",
    "DirectDebitEntry",
    "BatchFile",
    # Reporting and orchestration
    "format_import_result",
    "report_import_result",
    "build_feedback",
    "ImportOrchestrator",
    "FileRunResult",
]
