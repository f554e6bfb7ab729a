"""
Import Report Module

Formats import outcomes into status strings and feedback messages.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .importer import ImportOutcome

logger = logging.getLogger(__name__)

SUCCESS = "Success"


class FeedbackKind(Enum):
    """Kind of import feedback."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class ImportFeedback:
    """Message sent to operators after a file was processed."""

    kind: FeedbackKind
    subject: str
    body: str


def format_import_result(outcome: ImportOutcome) -> str:
    """Format an outcome as a status string.

    Returns:
        "Success", or "Imported: <ids> Errors: <errors>"
    """
    if outcome.succeeded:
        return SUCCESS

    return f"Imported: {', '.join(outcome.success)} Errors: {'; '.join(outcome.errors)}"


def report_import_result(outcome: ImportOutcome, now: datetime | None = None) -> str:
    """Format an outcome and log it.

    Returns:
        Status string
    """
    result = format_import_result(outcome)
    timestamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    logger.info(f"CsvImporter#import time: {timestamp} Imported {outcome.file}: {result}")
    return result


def build_feedback(entry: str, result: str) -> ImportFeedback:
    """Build the operator message for a processed file.

    Args:
        entry: Remote file name
        result: Status string from format_import_result
    """
    if result == SUCCESS:
        return ImportFeedback(
            kind=FeedbackKind.SUCCESS,
            subject="Successful Import",
            body=f"Import of the file {entry} done."
        )

    return ImportFeedback(
        kind=FeedbackKind.FAILURE,
        subject="Import CSV failed",
        body="\n".join([f"Import of the file {entry} failed with errors:", result])
    )
