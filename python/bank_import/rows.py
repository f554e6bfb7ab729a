"""
Import Row Module

Parses delimited transaction files into rows keyed by their header columns.
"""

import csv
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from io import StringIO
from pathlib import Path

DESCRIPTION_FIELDS = [f"DESC{i}" for i in range(1, 15)]


@dataclass
class ImportRow:
    """One parsed line of an import file."""

    data: dict[str, str] = field(default_factory=dict)
    line_number: int = 0

    def get(self, column: str) -> str:
        """Get a column value, blank when missing."""
        value = self.data.get(column)
        return value if value is not None else ""

    @property
    def activity_id(self) -> str:
        return self.get("ACTIVITY_ID").strip()

    @property
    def sender_account(self) -> str:
        return self.get("SENDER_KONTO").strip()

    @property
    def sender_bank_code(self) -> str:
        return self.get("SENDER_BLZ").strip()

    @property
    def sender_name(self) -> str:
        return self.get("SENDER_NAME")

    @property
    def receiver_account(self) -> str:
        return self.get("RECEIVER_KONTO").strip()

    @property
    def receiver_bank_code(self) -> str:
        return self.get("RECEIVER_BLZ").strip()

    @property
    def receiver_name(self) -> str:
        return self.get("RECEIVER_NAME")

    @property
    def subtype_code(self) -> str:
        return self.get("UMSATZ_KEY").strip()

    @property
    def amount(self) -> str:
        return self.get("AMOUNT")

    @property
    def entry_date(self) -> str:
        return self.get("ENTRY_DATE")

    @property
    def pending_transfer_id(self) -> str:
        return self.get("DEPOT_ACTIVITY_ID").strip()

    @property
    def subject(self) -> str:
        """Concatenate the non-blank description fragments in column order."""
        return "".join(
            self.get(name) for name in DESCRIPTION_FIELDS if self.get(name).strip()
        )


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string to Decimal.

    Accepts a comma as decimal separator when no dot is present.

    Raises:
        ValueError: If the amount cannot be parsed
    """
    cleaned = re.sub(r'\s', '', amount_str or "")
    if "," in cleaned and "." not in cleaned:
        cleaned = cleaned.replace(",", ".")

    if not cleaned:
        raise ValueError("Amount is missing")

    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Cannot parse amount: {amount_str}")


DATE_FORMATS = [
    "%Y-%m-%d",
    "%d.%m.%Y",
    "%d/%m/%Y",
]


def parse_entry_date(date_str: str) -> date:
    """Parse an entry date.

    Raises:
        ValueError: If the date matches none of the known formats
    """
    date_str = (date_str or "").strip()

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    raise ValueError(f"Cannot parse date: {date_str}")


def parse_rows(content: str, delimiter: str = ";") -> list[ImportRow]:
    """Parse delimited content into rows.

    The first line is the header. Blank lines are skipped.

    Args:
        content: File content
        delimiter: Column delimiter

    Returns:
        Rows in file order
    """
    if content.startswith('\ufeff'):
        content = content[1:]
    content = content.replace('\r\n', '\n').replace('\r', '\n')

    reader = csv.DictReader(StringIO(content), delimiter=delimiter)
    if reader.fieldnames is None:
        return []

    rows = []
    for record in reader:
        values = [v for k, v in record.items() if k is not None]
        if all(v is None or not str(v).strip() for v in values):
            continue
        # Short lines leave trailing columns as None
        data = {k: (v or "") for k, v in record.items() if k is not None}
        rows.append(ImportRow(data=data, line_number=reader.line_num))

    return rows


def read_import_rows(
    file_path: Path | str,
    delimiter: str = ";",
    encoding: str = "utf-8"
) -> list[ImportRow]:
    """Read and parse an import file.

    Args:
        file_path: Path to the file
        delimiter: Column delimiter
        encoding: File encoding

    Returns:
        Rows in file order
    """
    with open(Path(file_path), encoding=encoding, newline="") as f:
        content = f.read()

    return parse_rows(content, delimiter)
