"""
Account Store Module

Looks up accounts and persists the transfers created by an import.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from psycopg2.extras import RealDictCursor

from .exceptions import PersistenceError
from .models import Account, AccountTransfer, BankTransfer, TransferState

logger = logging.getLogger(__name__)


class AccountStore(ABC):
    """Persistent account and transfer store."""

    @abstractmethod
    def find_account(self, account_number: str) -> Account | None:
        """Find an account by its account number."""
        pass

    @abstractmethod
    def find_account_transfer(self, sender: Account, transfer_id: str) -> AccountTransfer | None:
        """Find one of the sender's outgoing account transfers."""
        pass

    @abstractmethod
    def save_account_transfer(self, transfer: AccountTransfer) -> None:
        """Persist a new account transfer."""
        pass

    @abstractmethod
    def complete_account_transfer(self, transfer: AccountTransfer) -> None:
        """Move a pending account transfer to completed."""
        pass

    @abstractmethod
    def save_bank_transfer(self, transfer: BankTransfer) -> None:
        """Persist a new outbound bank transfer."""
        pass


class PostgresAccountStore(AccountStore):
    """Account store backed by PostgreSQL."""

    def __init__(self, db_connection: Any):
        """Initialize store.

        Args:
            db_connection: PostgreSQL database connection
        """
        self.db = db_connection

    def find_account(self, account_number: str) -> Account | None:
        row = self._read("find account", """
            SELECT id, account_no, holder_name, bank_code
            FROM accounts
            WHERE account_no = %s
        """, (account_number,))

        if not row:
            return None

        return Account(
            id=row["id"],
            account_number=row["account_no"],
            holder_name=row.get("holder_name") or "",
            bank_code=row.get("bank_code") or ""
        )

    def find_account_transfer(self, sender: Account, transfer_id: str) -> AccountTransfer | None:
        if not str(transfer_id).isdigit():
            return None

        row = self._read("find account transfer", """
            SELECT id, amount, subject, receiver_account_no, entry_date, state
            FROM account_transfers
            WHERE id = %s AND sender_account_id = %s
        """, (int(transfer_id), sender.id))

        if not row:
            return None

        return AccountTransfer(
            id=row["id"],
            sender=sender,
            amount=row["amount"],
            subject=row["subject"] or "",
            receiver_account_number=row["receiver_account_no"],
            entry_date=row["entry_date"],
            state=TransferState(row["state"])
        )

    def save_account_transfer(self, transfer: AccountTransfer) -> None:
        def insert(cur):
            cur.execute("""
                INSERT INTO account_transfers (
                    sender_account_id, amount, subject, receiver_account_no,
                    entry_date, state, skip_mobile_tan
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING id
            """, (
                transfer.sender.id,
                transfer.amount,
                transfer.subject,
                transfer.receiver_account_number,
                transfer.entry_date,
                transfer.state.value,
                transfer.skip_mobile_tan
            ))
            transfer.id = cur.fetchone()[0]

        self._write("save account transfer", insert)

    def complete_account_transfer(self, transfer: AccountTransfer) -> None:
        completed_at = datetime.now()

        def update(cur):
            cur.execute("""
                UPDATE account_transfers
                SET state = %s, subject = %s, completed_at = %s
                WHERE id = %s AND state = %s
            """, (
                TransferState.COMPLETED.value,
                transfer.subject,
                completed_at,
                transfer.id,
                TransferState.PENDING.value
            ))
            if cur.rowcount != 1:
                raise PersistenceError(f"AccountTransfer {transfer.id} is no longer pending")

        self._write("complete account transfer", update)
        transfer.state = TransferState.COMPLETED
        transfer.completed_at = completed_at

    def save_bank_transfer(self, transfer: BankTransfer) -> None:
        def insert(cur):
            cur.execute("""
                INSERT INTO bank_transfers (
                    sender_account_id, amount, subject, rec_holder,
                    rec_account_number, rec_bank_code, created_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING id
            """, (
                transfer.sender.id,
                transfer.amount,
                transfer.subject,
                transfer.receiver_holder,
                transfer.receiver_account_number,
                transfer.receiver_bank_code,
                transfer.created_at
            ))
            transfer.id = cur.fetchone()[0]

        self._write("save bank transfer", insert)

    def _read(self, action: str, query: str, params: tuple) -> dict | None:
        """Fetch a single row.

        Raises:
            PersistenceError: If the query fails; the transaction is rolled back
        """
        try:
            with self.db.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, params)
                return cur.fetchone()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}: {e}") from e

    def _write(self, action: str, statement) -> None:
        """Run a write in its own transaction.

        Raises:
            PersistenceError: If the statement fails; the transaction is rolled back
        """
        try:
            with self.db.cursor() as cur:
                statement(cur)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"Failed to {action}: {e}") from e
