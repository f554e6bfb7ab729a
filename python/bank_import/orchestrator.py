"""
Import Orchestrator Module

Picks up delivered files from the remote share, imports them one at a time
and quarantines the first file that does not import cleanly.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .config import ImportConfig
from .importer import CsvImporter, ImportOutcome
from .notifications import NotificationSink
from .report import SUCCESS, build_feedback, report_import_result
from .transport import RemoteTransport

logger = logging.getLogger(__name__)


@dataclass
class FileRunResult:
    """What happened to one remote file during a run."""

    entry: str
    outcome: ImportOutcome
    result: str
    quarantined: bool = False
    notified: bool = False

    @property
    def succeeded(self) -> bool:
        return self.result == SUCCESS


class ImportOrchestrator:
    """Runs the import for every file waiting on the remote share."""

    def __init__(
        self,
        importer: CsvImporter,
        transport: RemoteTransport,
        config: ImportConfig,
        notifier: NotificationSink | None = None
    ):
        """Initialize orchestrator.

        Args:
            importer: File importer
            transport: Remote share holding the delivered files
            config: Import configuration
            notifier: Receiver of success/failure feedback
        """
        self.importer = importer
        self.transport = transport
        self.config = config
        self.notifier = notifier

    def eligible_entries(self, entries: list[str]) -> list[str]:
        """Select the files to import, in sorted order.

        A file is eligible when it has the import extension or a ready
        marker ("<name>.start") sits next to it. Markers themselves are
        never imported.
        """
        names = set(entries)
        marker = self.config.ready_marker_suffix

        return [
            entry for entry in sorted(names)
            if not entry.endswith(marker)
            and (entry.endswith(self.config.file_extension) or f"{entry}{marker}" in names)
        ]

    def transfer_and_import(self, send_notification: bool = True) -> list[FileRunResult]:
        """Import every eligible remote file, stopping at the first failure.

        Args:
            send_notification: Send feedback for each processed file

        Returns:
            Results for the processed files, in processing order
        """
        remote_dir = self.config.transport.remote_dir
        entries = self.transport.list_entries(remote_dir)
        eligible = self.eligible_entries(entries)
        logger.info(f"Found {len(eligible)} files to import in {remote_dir}")

        results = []
        for entry in eligible:
            run = self.process_entry(entry, entries, send_notification)
            results.append(run)
            if not run.succeeded:
                logger.warning(f"Stopping import run at {entry}")
                break

        return results

    def process_entry(
        self,
        entry: str,
        entries: list[str],
        send_notification: bool = True
    ) -> FileRunResult:
        """Stage, import and follow up on a single remote file."""
        local_file = self._stage(entry, entries)

        outcome = self.importer.import_file(local_file)
        result = report_import_result(outcome)
        run = FileRunResult(entry=entry, outcome=outcome, result=result)

        if run.succeeded:
            local_file.unlink()
        else:
            self._upload_error_file(entry, result)
            run.quarantined = True

        if send_notification and self.notifier:
            self.notifier.send(build_feedback(entry, result))
            run.notified = True

        return run

    def _stage(self, entry: str, entries: list[str]) -> Path:
        """Download a remote file and remove its ready marker."""
        remote_file = f"{self.config.transport.remote_dir}/{entry}"
        local_file = self.config.download_path / entry

        self.transport.download(remote_file, local_file)

        marker = f"{entry}{self.config.ready_marker_suffix}"
        if marker in entries:
            self.transport.remove(f"{self.config.transport.remote_dir}/{marker}")

        return local_file

    def _upload_error_file(self, entry: str, result: str) -> None:
        """Write the failed result next to the file name and upload it to quarantine."""
        error_file = self.config.error_path / entry
        error_file.parent.mkdir(parents=True, exist_ok=True)
        error_file.write_text(result, encoding="utf-8")

        self.transport.upload(error_file, f"{self.config.transport.quarantine_dir}/{entry}")
        logger.warning(f"Quarantined {entry}: {result}")
