"""
Pytest configuration and fixtures for bank import tests.
"""

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "python"))

from bank_import.config import ImportConfig
from bank_import.models import Account, AccountTransfer, TransferState
from bank_import.store import AccountStore

HEADER = [
    "ACTIVITY_ID",
    "SENDER_KONTO",
    "SENDER_BLZ",
    "SENDER_NAME",
    "RECEIVER_KONTO",
    "RECEIVER_BLZ",
    "RECEIVER_NAME",
    "UMSATZ_KEY",
    "AMOUNT",
    "ENTRY_DATE",
    "DESC1",
    "DESC2",
    "DESC3",
    "DEPOT_ACTIVITY_ID",
]


class FakeAccountStore(AccountStore):
    """In-memory account store recording every write."""

    def __init__(self):
        self.accounts: dict[str, Account] = {}
        self.account_transfers: dict[str, AccountTransfer] = {}
        self.saved_account_transfers: list[AccountTransfer] = []
        self.completed_account_transfers: list[AccountTransfer] = []
        self.saved_bank_transfers: list = []
        self.lookups = 0
        self.failures_left = 0

    def add_account(self, account_number: str, holder_name: str = "") -> Account:
        account = Account(id=len(self.accounts) + 1, account_number=account_number, holder_name=holder_name)
        self.accounts[account_number] = account
        return account

    def add_pending_transfer(self, transfer_id: str, sender: Account, state=TransferState.PENDING):
        transfer = AccountTransfer(
            id=int(transfer_id),
            sender=sender,
            amount=Decimal("10.00"),
            subject="old subject",
            receiver_account_number="2000000002",
            entry_date=date(2025, 1, 10),
            state=state
        )
        self.account_transfers[transfer_id] = transfer
        return transfer

    def _maybe_fail(self):
        if self.failures_left:
            self.failures_left -= 1
            raise RuntimeError("database is locked")

    def find_account(self, account_number):
        self.lookups += 1
        return self.accounts.get(account_number)

    def find_account_transfer(self, sender, transfer_id):
        transfer = self.account_transfers.get(transfer_id)
        if transfer and transfer.sender is sender:
            return transfer
        return None

    def save_account_transfer(self, transfer):
        self._maybe_fail()
        self.saved_account_transfers.append(transfer)

    def complete_account_transfer(self, transfer):
        self._maybe_fail()
        transfer.state = TransferState.COMPLETED
        self.completed_account_transfers.append(transfer)

    def save_bank_transfer(self, transfer):
        self._maybe_fail()
        self.saved_bank_transfers.append(transfer)

    @property
    def write_count(self) -> int:
        return (
            len(self.saved_account_transfers)
            + len(self.completed_account_transfers)
            + len(self.saved_bank_transfers)
        )


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def config(tmp_path) -> ImportConfig:
    """Import configuration rooted in a temporary directory."""
    return ImportConfig(base_dir=tmp_path)


@pytest.fixture
def store() -> FakeAccountStore:
    """Store with two internal accounts."""
    store = FakeAccountStore()
    store.add_account("1000000001", "Erika Mustermann")
    store.add_account("2000000002", "Max Mustermann")
    return store


def make_row(**values) -> dict:
    """Build a row dict with every header column present."""
    row = {column: "" for column in HEADER}
    row.update(values)
    return row


@pytest.fixture
def account_transfer_row() -> dict:
    return make_row(
        ACTIVITY_ID="A1",
        SENDER_KONTO="1000000001",
        SENDER_BLZ="00000000",
        RECEIVER_KONTO="2000000002",
        RECEIVER_BLZ="00000000",
        UMSATZ_KEY="10",
        AMOUNT="25.50",
        ENTRY_DATE="2025-01-15",
        DESC1="Rent ",
        DESC2="January"
    )


@pytest.fixture
def bank_transfer_row() -> dict:
    return make_row(
        ACTIVITY_ID="B1",
        SENDER_KONTO="1000000001",
        SENDER_BLZ="00000000",
        RECEIVER_KONTO="12345678",
        RECEIVER_BLZ="50010517",
        RECEIVER_NAME="Hans Schmidt",
        UMSATZ_KEY="10",
        AMOUNT="100.00",
        ENTRY_DATE="2025-01-15",
        DESC1="Invoice 4711"
    )


@pytest.fixture
def direct_debit_row() -> dict:
    return make_row(
        ACTIVITY_ID="D1",
        SENDER_KONTO="987654321",
        SENDER_BLZ="37040044",
        SENDER_NAME="Jürgen Müller-Lüdenscheid",
        RECEIVER_KONTO="8888888888",
        RECEIVER_BLZ="70022200",
        UMSATZ_KEY="16",
        AMOUNT="-42.10",
        ENTRY_DATE="2025-01-15",
        DESC1="Membership ",
        DESC3="2025"
    )


@pytest.fixture
def write_import_file(tmp_path):
    """Write rows to a semicolon separated import file."""

    def _write(rows: list[dict], name: str = "import.csv") -> Path:
        lines = [";".join(HEADER)]
        for row in rows:
            lines.append(";".join(row.get(column, "") for column in HEADER))
        path = tmp_path / "incoming" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
