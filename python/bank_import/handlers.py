"""
Transaction Handlers Module

Turns classified import rows into persisted transfers or direct debit
batch entries.

Handlers return a (success, error_message) tuple for rejections that a retry
cannot fix, such as a missing account or a failed validation. Anything they
raise is treated as a failed attempt by the retry runner.
"""

import logging
import re
import unicodedata

from .batch_document import DirectDebitBatch
from .classification import TransactionKind
from .config import ImportConfig
from .models import AccountTransfer, BankTransfer, TransferState
from .rows import ImportRow, parse_amount, parse_entry_date
from .store import AccountStore

logger = logging.getLogger(__name__)

HandlerResult = tuple[bool, str]

# Letters NFKD does not decompose into a base letter
TRANSLITERATIONS = {
    "ß": "ss",
    "Æ": "AE",
    "æ": "ae",
    "Ø": "O",
    "ø": "o",
    "Œ": "OE",
    "œ": "oe",
    "Ł": "L",
    "ł": "l",
    "Đ": "D",
    "đ": "d",
    "Þ": "TH",
    "þ": "th",
}


def transliterate_holder(name: str) -> str:
    """Reduce a holder name to plain ASCII letters, digits and whitespace.

    Example: "Jürgen Müller-Lüdenscheid" -> "Jurgen MullerLudenscheid"
    """
    name = "".join(TRANSLITERATIONS.get(ch, ch) for ch in name or "")
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^\w\s]", "", ascii_name)


class TransactionHandlers:
    """Dispatches rows to the handler for their transaction kind."""

    def __init__(self, store: AccountStore, config: ImportConfig):
        """Initialize handlers.

        Args:
            store: Account and transfer store
            config: Import configuration
        """
        self.store = store
        self.config = config

    def handle(
        self,
        kind: TransactionKind,
        row: ImportRow,
        batch: DirectDebitBatch,
        validation_only: bool = False
    ) -> HandlerResult:
        """Process a row according to its transaction kind.

        Args:
            kind: Classified transaction kind
            row: Import row
            batch: Direct debit batch of the current file
            validation_only: Check the row without persisting anything

        Returns:
            Tuple of (success, error_message)
        """
        if kind == TransactionKind.ACCOUNT_TRANSFER:
            return self.add_account_transfer(row, validation_only)
        if kind == TransactionKind.BANK_TRANSFER:
            return self.add_bank_transfer(row, validation_only)
        if kind == TransactionKind.DIRECT_DEBIT_COLLECTION:
            return self.add_direct_debit(row, batch, validation_only)

        return False, f"{row.activity_id}: Transaction type not found"

    def _find_sender(self, row: ImportRow):
        sender = self.store.find_account(row.sender_account)
        if sender is None:
            return None, f"{row.activity_id}: Account {row.sender_account} not found"
        return sender, ""

    def add_account_transfer(self, row: ImportRow, validation_only: bool = False) -> HandlerResult:
        """Create a new account transfer or complete a pending one."""
        sender, error = self._find_sender(row)
        if sender is None:
            return False, error

        if not row.pending_transfer_id:
            transfer = AccountTransfer(
                sender=sender,
                amount=parse_amount(row.amount),
                subject=row.subject,
                receiver_account_number=row.receiver_account,
                entry_date=parse_entry_date(row.entry_date),
                skip_mobile_tan=True
            )
        else:
            transfer = self.store.find_account_transfer(sender, row.pending_transfer_id)
            if transfer is None:
                return False, f"{row.activity_id}: AccountTransfer not found"
            if transfer.state != TransferState.PENDING:
                return False, (
                    f"{row.activity_id}: AccountTransfer state expected 'pending' "
                    f"but was '{transfer.state.value}'"
                )
            transfer.subject = row.subject

        is_valid, messages = transfer.validate()
        if not is_valid:
            return False, f"{row.activity_id}: AccountTransfer validation error(s): {'; '.join(messages)}"

        if not validation_only:
            if transfer.is_new:
                self.store.save_account_transfer(transfer)
            else:
                self.store.complete_account_transfer(transfer)

        return True, ""

    def add_bank_transfer(self, row: ImportRow, validation_only: bool = False) -> HandlerResult:
        """Create an outbound transfer to another bank."""
        sender, error = self._find_sender(row)
        if sender is None:
            return False, error

        transfer = BankTransfer(
            sender=sender,
            amount=parse_amount(row.amount),
            subject=row.subject,
            receiver_holder=row.receiver_name,
            receiver_account_number=row.receiver_account,
            receiver_bank_code=row.receiver_bank_code
        )

        is_valid, messages = transfer.validate()
        if not is_valid:
            return False, f"{row.activity_id}: BankTransfer validation error(s): {'; '.join(messages)}"

        if not validation_only:
            self.store.save_bank_transfer(transfer)

        return True, ""

    def add_direct_debit(
        self,
        row: ImportRow,
        batch: DirectDebitBatch,
        validation_only: bool = False
    ) -> HandlerResult:
        """Add a direct debit collection to the file's batch."""
        if not batch.valid_sender(row.sender_account, row.sender_bank_code):
            return False, f"{row.activity_id}: BLZ/Konto not valid, csv file not written"

        holder = transliterate_holder(row.sender_name)
        amount = abs(parse_amount(row.amount))

        if validation_only:
            return True, ""

        batch.add_entry(row.sender_account, row.sender_bank_code, holder, amount, row.subject)
        return True, ""
