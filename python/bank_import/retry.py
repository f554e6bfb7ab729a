"""
Row Retry Module

Runs a row handler up to a fixed number of attempts.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from .rows import ImportRow

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 5


@dataclass
class RetryOutcome:
    """Result of running one row through the retry runner."""

    success: bool
    error: str = ""
    attempts: int = 0


def run_with_retry(
    row: ImportRow,
    handler: Callable[[], tuple[bool, str]],
    max_attempts: int = DEFAULT_ATTEMPTS
) -> RetryOutcome:
    """Run a handler for a row, retrying when it raises.

    A returned rejection ends the loop at once. An exception is recorded as
    "<ActivityId>: <message>" and the handler runs again, with no delay,
    until the attempts are used up.

    Args:
        row: Row being processed, for error prefixes
        handler: Callable returning (success, error_message)
        max_attempts: Attempt budget

    Returns:
        RetryOutcome with the last error when the row did not succeed
    """
    error = ""
    attempts = 0

    while attempts < max_attempts:
        attempts += 1
        try:
            success, error = handler()
        except Exception as e:
            error = f"{row.activity_id}: {e}"
            logger.warning(f"Row {row.activity_id} attempt {attempts}/{max_attempts} failed: {e}")
            continue

        if success:
            return RetryOutcome(success=True, attempts=attempts)
        return RetryOutcome(success=False, error=error, attempts=attempts)

    return RetryOutcome(success=False, error=error, attempts=attempts)
