"""
Command line entry point for the CSV import.
"""

import logging
import os
import sys

import psycopg2

from .config import load_config
from .importer import CsvImporter
from .notifications import AuditLogNotificationSink, LoggingNotificationSink
from .orchestrator import ImportOrchestrator
from .report import report_import_result
from .store import PostgresAccountStore
from .transport import MountedDirectoryTransport

# Database URL from environment
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{os.getenv('POSTGRES_USER', 'accounting')}:"
    f"{os.getenv('POSTGRES_PASSWORD', 'password')}@"
    f"{os.getenv('POSTGRES_HOST', 'localhost')}:"
    f"{os.getenv('POSTGRES_PORT', '5432')}/"
    f"{os.getenv('POSTGRES_DB', 'accounting_automation')}"
)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Import bank transaction CSV files")
    parser.add_argument("--config-dir", help="Directory containing csv_import.yaml")
    parser.add_argument("--base-dir", help="Root for local download, error and batch directories")
    parser.add_argument("--log-level", default="INFO", help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Import every file waiting on the remote share")
    run_parser.add_argument("--no-notify", action="store_true", help="Do not send import feedback")

    file_parser = subparsers.add_parser("import", help="Import a single local file")
    file_parser.add_argument("file", help="Path to the CSV file")
    file_parser.add_argument("--validation-only", action="store_true", help="Check rows without persisting")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    config = load_config(args.config_dir, args.base_dir)
    db = psycopg2.connect(DATABASE_URL)

    try:
        importer = CsvImporter(PostgresAccountStore(db), config)

        if args.command == "import":
            outcome = importer.import_file(args.file, validation_only=args.validation_only)
            result = report_import_result(outcome)
            print(result)
            return 0 if outcome.succeeded else 1

        notifier = None
        if config.notifications_enabled:
            if config.notification_channel == "audit_log":
                notifier = AuditLogNotificationSink(db)
            else:
                notifier = LoggingNotificationSink()
        orchestrator = ImportOrchestrator(
            importer,
            MountedDirectoryTransport.from_config(config.transport),
            config,
            notifier=notifier
        )
        results = orchestrator.transfer_and_import(send_notification=not args.no_notify)

        for run in results:
            print(f"{run.entry}: {run.result}")
        return 0 if all(run.succeeded for run in results) else 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
