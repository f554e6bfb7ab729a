"""
Row Classification Module

Decides which kind of payment transaction a row describes.
"""

from enum import Enum

from .config import ImportConfig
from .rows import ImportRow


class TransactionKind(Enum):
    """Kinds of transactions an import row can describe."""
    ACCOUNT_TRANSFER = "AccountTransfer"
    BANK_TRANSFER = "BankTransfer"
    DIRECT_DEBIT_COLLECTION = "DirectDebitCollection"
    UNCLASSIFIED = "Unclassified"


def classify(
    sender_bank_code: str,
    receiver_bank_code: str,
    subtype_code: str,
    config: ImportConfig
) -> TransactionKind:
    """Classify a transaction from its bank codes and subtype code.

    Rules are checked in order and the first match wins.

    Args:
        sender_bank_code: Sender bank code (BLZ)
        receiver_bank_code: Receiver bank code (BLZ)
        subtype_code: Transaction subtype code (UMSATZ_KEY)
        config: Import configuration holding the sentinel codes

    Returns:
        TransactionKind
    """
    internal = config.internal_bank_code

    if sender_bank_code == internal and receiver_bank_code == internal:
        return TransactionKind.ACCOUNT_TRANSFER

    if sender_bank_code == internal and subtype_code == config.standard_subtype:
        return TransactionKind.BANK_TRANSFER

    if receiver_bank_code == config.collector_bank_code and subtype_code == config.collection_subtype:
        return TransactionKind.DIRECT_DEBIT_COLLECTION

    return TransactionKind.UNCLASSIFIED


def classify_row(row: ImportRow, config: ImportConfig) -> TransactionKind:
    """Classify an import row."""
    return classify(row.sender_bank_code, row.receiver_bank_code, row.subtype_code, config)


def validate_row(row: ImportRow, config: ImportConfig) -> tuple[bool, str]:
    """Check that the row's subtype code is allowed.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if row.subtype_code in config.allowed_subtypes:
        return True, ""

    return False, f"{row.activity_id}: UMSATZ_KEY {row.subtype_code} is not allowed"
