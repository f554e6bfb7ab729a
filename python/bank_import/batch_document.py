"""
Direct Debit Batch Module

Accumulates direct debit collections for one import file and writes them
as a single settlement file.
"""

import csv
import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from io import StringIO
from pathlib import Path

from .config import ImportConfig
from .exceptions import BatchDocumentError

logger = logging.getLogger(__name__)


@dataclass
class DirectDebitEntry:
    """A single collection from a debtor account."""

    account_number: str
    bank_code: str
    holder: str
    amount: Decimal
    subject: str

    def to_dict(self) -> dict:
        return {
            "account_number": self.account_number,
            "bank_code": self.bank_code,
            "holder": self.holder,
            "amount": float(self.amount),
            "subject": self.subject
        }


@dataclass
class BatchFile:
    """A settlement file written to disk."""

    path: Path
    entry_count: int
    total_amount: Decimal
    checksum: str
    written_at: datetime = field(default_factory=datetime.now)


@dataclass
class DirectDebitBatch:
    """Append-only direct debit batch owned by one file import."""

    kind: str
    creditor_account: str
    creditor_bank_code: str
    creditor_name: str
    internal_bank_code: str = "00000000"
    entries: list[DirectDebitEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    written: BatchFile | None = None

    # Settlement file columns
    COLUMNS = [
        "Kind",
        "Creditor Account",
        "Creditor Bank Code",
        "Creditor Name",
        "Debtor Account",
        "Debtor Bank Code",
        "Debtor Name",
        "Amount",
        "Subject",
    ]

    @classmethod
    def from_config(cls, config: ImportConfig) -> "DirectDebitBatch":
        creditor = config.creditor
        return cls(
            kind=creditor.kind,
            creditor_account=creditor.account_number,
            creditor_bank_code=creditor.bank_code,
            creditor_name=creditor.name,
            internal_bank_code=config.internal_bank_code
        )

    @property
    def total_amount(self) -> Decimal:
        return sum((e.amount for e in self.entries), Decimal("0"))

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    def is_empty(self) -> bool:
        return not self.entries

    def valid_sender(self, account_number: str, bank_code: str) -> bool:
        """Check whether an account can be debited through this batch.

        Account numbers have 1-10 digits and bank codes exactly 8 digits.
        Accounts held at the bank itself are not collected by direct debit.
        """
        account_number = (account_number or "").strip()
        bank_code = (bank_code or "").strip()

        if not account_number.isdigit() or len(account_number) > 10:
            return False

        if not bank_code.isdigit() or len(bank_code) != 8:
            return False

        return bank_code != self.internal_bank_code

    def add_entry(
        self,
        account_number: str,
        bank_code: str,
        holder: str,
        amount: Decimal,
        subject: str
    ) -> DirectDebitEntry:
        """Append a collection to the batch.

        Raises:
            BatchDocumentError: If the batch was already written
        """
        if self.written:
            raise BatchDocumentError("Batch already written, entries can no longer be added")

        if amount < 0:
            raise ValueError(f"Direct debit amount must not be negative: {amount}")

        entry = DirectDebitEntry(
            account_number=account_number.strip(),
            bank_code=bank_code.strip(),
            holder=holder,
            amount=amount,
            subject=subject
        )
        self.entries.append(entry)
        return entry

    def to_csv(self) -> str:
        """Render the batch as settlement file content."""
        output = StringIO()
        writer = csv.writer(output, delimiter=";", lineterminator="\n")
        writer.writerow(self.COLUMNS)

        for entry in self.entries:
            writer.writerow([
                self.kind,
                self.creditor_account,
                self.creditor_bank_code,
                self.creditor_name,
                entry.account_number,
                entry.bank_code,
                entry.holder.upper(),
                f"{entry.amount:.2f}",
                entry.subject,
            ])

        return output.getvalue()

    def write(self, file_path: Path | str) -> BatchFile:
        """Write the batch to a settlement file.

        A batch is written at most once.

        Raises:
            BatchDocumentError: If the batch is empty, already written or the write fails
        """
        if self.written:
            raise BatchDocumentError(f"Batch already written to {self.written.path}")

        if self.is_empty():
            raise BatchDocumentError("Cannot write an empty batch")

        file_path = Path(file_path)
        content = self.to_csv()

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise BatchDocumentError(f"Failed to write batch to {file_path}: {e}") from e

        self.written = BatchFile(
            path=file_path,
            entry_count=self.entry_count,
            total_amount=self.total_amount,
            checksum=hashlib.sha256(content.encode()).hexdigest()[:16]
        )

        logger.info(
            f"Wrote direct debit batch {file_path} "
            f"({self.entry_count} entries, {self.total_amount:.2f})"
        )
        return self.written


def batch_file_path(config: ImportConfig, now: datetime | None = None) -> Path:
    """Build the settlement file path from the current timestamp.

    A counter is added when a batch with the same timestamp already exists.
    """
    stem = config.batch_prefix + (now or datetime.now()).strftime(config.batch_timestamp_format)
    path = config.batch_path / f"{stem}{config.batch_suffix}"

    counter = 1
    while path.exists():
        path = config.batch_path / f"{stem}_{counter}{config.batch_suffix}"
        counter += 1

    return path
