"""
Transfer Models Module

Accounts and the transfers an import creates or completes.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class TransferState(Enum):
    """Account transfer lifecycle state."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class Account:
    """A customer account held at the bank."""

    id: int
    account_number: str
    holder_name: str = ""
    bank_code: str = ""


@dataclass
class AccountTransfer:
    """A transfer between two accounts held at the bank."""

    sender: Account
    amount: Decimal
    subject: str
    receiver_account_number: str
    entry_date: date | None = None
    id: int | None = None
    state: TransferState = TransferState.PENDING
    skip_mobile_tan: bool = False
    completed_at: datetime | None = None

    @property
    def is_new(self) -> bool:
        return self.id is None

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the transfer.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []

        if self.amount <= 0:
            errors.append("Amount must be greater than 0")

        if not self.subject.strip():
            errors.append("Subject can't be blank")

        if not self.receiver_account_number:
            errors.append("Receiver can't be blank")
        elif self.receiver_account_number == self.sender.account_number:
            errors.append("Receiver must differ from sender")

        if self.is_new and self.entry_date is None:
            errors.append("Date can't be blank")

        return len(errors) == 0, errors


@dataclass
class BankTransfer:
    """An outbound transfer to an account at another bank."""

    sender: Account
    amount: Decimal
    subject: str
    receiver_holder: str
    receiver_account_number: str
    receiver_bank_code: str
    id: int | None = None
    created_at: datetime = field(default_factory=datetime.now)

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the transfer.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []

        if self.amount <= 0:
            errors.append("Amount must be greater than 0")

        if not self.subject.strip():
            errors.append("Subject can't be blank")

        if not self.receiver_holder.strip():
            errors.append("Receiver holder can't be blank")

        if not self.receiver_account_number.isdigit():
            errors.append("Receiver account number is invalid")

        if len(self.receiver_bank_code) != 8 or not self.receiver_bank_code.isdigit():
            errors.append("Receiver bank code is invalid")

        return len(errors) == 0, errors
