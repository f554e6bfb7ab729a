"""
Import Orchestrator Tests

Tests for remote file discovery, quarantine, reporting and notifications.
"""

import logging
from datetime import datetime
from unittest.mock import MagicMock, Mock

import pytest

from conftest import make_row
from bank_import.exceptions import TransportError
from bank_import.importer import CsvImporter, ImportOutcome
from bank_import.notifications import AuditLogNotificationSink, LoggingNotificationSink
from bank_import.orchestrator import ImportOrchestrator
from bank_import.report import (
    FeedbackKind,
    build_feedback,
    format_import_result,
    report_import_result,
)
from bank_import.transport import MountedDirectoryTransport


@pytest.fixture
def share(tmp_path):
    """Mounted remote share with the incoming directory created."""
    mount = tmp_path / "share"
    (mount / "data" / "files" / "csv").mkdir(parents=True)
    return mount


@pytest.fixture
def transport(share):
    return MountedDirectoryTransport(share, address="csv.example.com")


@pytest.fixture
def notifier():
    return Mock()


@pytest.fixture
def orchestrator(store, config, transport, notifier):
    return ImportOrchestrator(CsvImporter(store, config), transport, config, notifier=notifier)


def deliver(share, write_import_file, name, rows, marker=False):
    """Place an import file (and optionally its ready marker) on the share."""
    incoming = share / "data" / "files" / "csv"
    source = write_import_file(rows, name=name)
    (incoming / name).write_bytes(source.read_bytes())
    if marker:
        (incoming / f"{name}.start").write_text("")
    return incoming / name


class TestEligibleEntries:
    """Tests for remote file selection."""

    def test_extension_or_marker(self, orchestrator):
        entries = ["b.csv", "a.csv", "c.txt", "c.txt.start", "d.txt", "a.csv.start"]

        assert orchestrator.eligible_entries(entries) == ["a.csv", "b.csv", "c.txt"]

    def test_markers_never_selected(self, orchestrator):
        entries = ["x.csv.start", "x.csv.start.start"]

        assert orchestrator.eligible_entries(entries) == []


class TestTransferAndImport:
    """Tests for full import runs."""

    def test_successful_files(
        self, orchestrator, share, config, store, notifier, write_import_file,
        account_transfer_row, bank_transfer_row
    ):
        deliver(share, write_import_file, "001.csv", [account_transfer_row], marker=True)
        deliver(share, write_import_file, "002.csv", [bank_transfer_row])

        results = orchestrator.transfer_and_import()

        assert [r.entry for r in results] == ["001.csv", "002.csv"]
        assert all(r.succeeded for r in results)
        assert not (share / "data" / "files" / "csv" / "001.csv.start").exists()
        assert not (config.download_path / "001.csv").exists()
        assert store.write_count == 2

        feedback = notifier.send.call_args_list[0].args[0]
        assert feedback.kind == FeedbackKind.SUCCESS
        assert feedback.subject == "Successful Import"
        assert feedback.body == "Import of the file 001.csv done."

    def test_stops_and_quarantines_first_failure(
        self, orchestrator, share, config, store, notifier, write_import_file,
        account_transfer_row, bank_transfer_row
    ):
        bad = make_row(ACTIVITY_ID="Z1", UMSATZ_KEY="99")
        deliver(share, write_import_file, "001.csv", [account_transfer_row])
        deliver(share, write_import_file, "002.csv", [bad])
        deliver(share, write_import_file, "003.csv", [bank_transfer_row])

        results = orchestrator.transfer_and_import()

        assert [r.entry for r in results] == ["001.csv", "002.csv"]
        failed = results[-1]
        assert failed.result == "Imported:  Errors: Z1: UMSATZ_KEY 99 is not allowed"
        assert failed.quarantined is True

        quarantined = share / "data" / "files" / "batch_processed" / "002.csv"
        assert quarantined.read_text() == failed.result
        assert (config.error_path / "002.csv").exists()
        assert (config.download_path / "002.csv").exists()
        assert store.saved_bank_transfers == []

        feedback = notifier.send.call_args.args[0]
        assert feedback.kind == FeedbackKind.FAILURE
        assert feedback.subject == "Import CSV failed"

    def test_without_notification(self, orchestrator, share, notifier, write_import_file, account_transfer_row):
        deliver(share, write_import_file, "001.csv", [account_transfer_row])

        results = orchestrator.transfer_and_import(send_notification=False)

        assert results[0].notified is False
        notifier.send.assert_not_called()

    def test_no_notifier(self, store, config, transport, share, write_import_file, account_transfer_row):
        deliver(share, write_import_file, "001.csv", [account_transfer_row])
        orchestrator = ImportOrchestrator(CsvImporter(store, config), transport, config)

        results = orchestrator.transfer_and_import()

        assert results[0].succeeded
        assert results[0].notified is False

    def test_empty_share(self, orchestrator, notifier):
        assert orchestrator.transfer_and_import() == []
        notifier.send.assert_not_called()

    def test_transport_failure_propagates(self, store, config, tmp_path):
        transport = MountedDirectoryTransport(tmp_path / "not-mounted")
        orchestrator = ImportOrchestrator(CsvImporter(store, config), transport, config)

        with pytest.raises(TransportError):
            orchestrator.transfer_and_import()


class TestMountedDirectoryTransport:
    """Tests for MountedDirectoryTransport class."""

    def test_round_trip(self, transport, share, tmp_path):
        local = tmp_path / "local.txt"
        local.write_text("payload")

        transport.upload(local, "/data/files/batch_processed/local.txt")
        transport.download("/data/files/batch_processed/local.txt", tmp_path / "copy" / "local.txt")

        assert (tmp_path / "copy" / "local.txt").read_text() == "payload"
        assert transport.list_entries("/data/files/batch_processed") == ["local.txt"]

        transport.remove("/data/files/batch_processed/local.txt")
        assert transport.list_entries("/data/files/batch_processed") == []

    def test_rejects_escaping_paths(self, transport):
        with pytest.raises(TransportError):
            transport.list_entries("/data/../../etc")

    def test_missing_remote_file(self, transport, tmp_path):
        with pytest.raises(TransportError):
            transport.download("/data/files/csv/nope.csv", tmp_path / "nope.csv")


class TestImportReport:
    """Tests for status formatting and feedback messages."""

    def test_success(self):
        assert format_import_result(ImportOutcome(file="f.csv", success=["1", "2"])) == "Success"

    def test_failure(self):
        outcome = ImportOutcome(file="f.csv", success=["1", "2"], errors=["3: boom", "4: bang"])

        assert format_import_result(outcome) == "Imported: 1, 2 Errors: 3: boom; 4: bang"

    def test_report_logs_result(self, caplog):
        outcome = ImportOutcome(file="f.csv", errors=["3: boom"])

        with caplog.at_level(logging.INFO, logger="bank_import.report"):
            result = report_import_result(outcome, now=datetime(2025, 1, 15, 9, 30, 0))

        assert result == "Imported:  Errors: 3: boom"
        assert "CsvImporter#import time: 2025-01-15 09:30:00 Imported f.csv: Imported:  Errors: 3: boom" in caplog.text

    def test_failure_feedback(self):
        feedback = build_feedback("002.csv", "Imported: 1 Errors: 2: boom")

        assert feedback.kind == FeedbackKind.FAILURE
        assert feedback.body == "Import of the file 002.csv failed with errors:\nImported: 1 Errors: 2: boom"


class TestNotificationSinks:
    """Tests for feedback delivery."""

    def test_logging_sink(self, caplog):
        sink = LoggingNotificationSink()

        with caplog.at_level(logging.INFO, logger="bank_import.notifications"):
            sink.send(build_feedback("001.csv", "Success"))

        assert "Successful Import" in caplog.text

    def test_logging_sink_truncates(self):
        sink = LoggingNotificationSink(max_message_length=100)
        message = "\n".join(f"line {i}" for i in range(50))

        truncated = sink.truncate_message(message)

        assert len(truncated) < len(message)
        assert truncated.endswith("...message truncated")

    def test_audit_log_sink(self):
        db = MagicMock()
        cursor = db.cursor.return_value.__enter__.return_value

        AuditLogNotificationSink(db).send(build_feedback("001.csv", "Success"))

        sql, params = cursor.execute.call_args.args
        assert "INSERT INTO audit_log" in sql
        assert params[1] == "success"
        db.commit.assert_called_once()

    def test_audit_log_sink_without_db(self):
        AuditLogNotificationSink(None).send(build_feedback("001.csv", "Success"))

    def test_audit_log_sink_swallows_db_errors(self):
        db = MagicMock()
        db.cursor.side_effect = RuntimeError("connection closed")

        AuditLogNotificationSink(db).send(build_feedback("001.csv", "Success"))

        db.rollback.assert_called_once()

    def test_audit_log_sink_rolls_back_failed_insert(self):
        db = MagicMock()
        cursor = db.cursor.return_value.__enter__.return_value
        cursor.execute.side_effect = RuntimeError('relation "audit_log" does not exist')

        AuditLogNotificationSink(db).send(build_feedback("001.csv", "Success"))

        db.rollback.assert_called_once()
        db.commit.assert_not_called()
