"""
Import Notification Module

Delivers import feedback to operators.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from .report import FeedbackKind, ImportFeedback

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    """Receiver of import feedback."""

    @abstractmethod
    def send(self, feedback: ImportFeedback) -> None:
        """Deliver a feedback message."""
        pass


class LoggingNotificationSink(NotificationSink):
    """Writes feedback to the application log."""

    STATUS_EMOJI = {
        FeedbackKind.SUCCESS: "✅",
        FeedbackKind.FAILURE: "❌",
    }

    def __init__(self, max_message_length: int = 4096):
        """Initialize sink.

        Args:
            max_message_length: Longest body logged before truncation
        """
        self.max_length = max_message_length

    def truncate_message(self, message: str) -> str:
        """Truncate message if too long, at the last complete line."""
        if len(message) <= self.max_length:
            return message

        truncate_at = self.max_length - 50
        last_newline = message[:truncate_at].rfind("\n")
        if last_newline > 0:
            truncate_at = last_newline

        return message[:truncate_at] + "\n\n...message truncated"

    def send(self, feedback: ImportFeedback) -> None:
        message = f"{self.STATUS_EMOJI[feedback.kind]} {feedback.subject}\n{self.truncate_message(feedback.body)}"
        if feedback.kind == FeedbackKind.SUCCESS:
            logger.info(message)
        else:
            logger.warning(message)


class AuditLogNotificationSink(NotificationSink):
    """Queues feedback in the audit log table for the mail workflow."""

    def __init__(self, db_connection: Any = None):
        """Initialize sink.

        Args:
            db_connection: PostgreSQL database connection
        """
        self.db = db_connection

    def send(self, feedback: ImportFeedback) -> None:
        if not self.db:
            return

        try:
            with self.db.cursor() as cur:
                cur.execute("""
                    INSERT INTO audit_log (action, details, status)
                    VALUES ('csv_import_feedback', %s, %s)
                """, (
                    json.dumps({"subject": feedback.subject, "body": feedback.body}),
                    feedback.kind.value
                ))
                self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to queue import feedback: {e}")
