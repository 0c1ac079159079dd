"""
Ledger service for recording and querying lending transactions.

This module provides a centralized API for appending issue and return
events to the ``transactions`` table and retrieving them with filters
and pagination.  Rows are written only by ``CirculationService`` and
are never updated or deleted.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, List, Optional

from library_circulation_api.app.core.db import Database
from library_circulation_api.app.core.errors import NotFoundError, StoreError
from library_circulation_api.app.schemas.transaction import TransactionRead


logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = "id, book_id, member_id, transaction_type, transaction_date"


class TransactionService:
    """Service class for writing and retrieving ledger transactions."""

    def __init__(self, db: Database) -> None:
        self.db = db

    @staticmethod
    def append(
        cursor: sqlite3.Cursor,
        book_id: str,
        member_id: str,
        transaction_type: str,
        transaction_date: str,
    ) -> TransactionRead:
        """Insert a new ledger row using the caller's cursor.

        The caller owns the surrounding database transaction, so the
        row becomes visible together with the other writes of the same
        circulation step.

        Parameters
        ----------
        cursor : sqlite3.Cursor
            Cursor of the connection performing the circulation step.
        book_id : str
            ISBN of the book.
        member_id : str
            Mobile number identifying the borrower.
        transaction_type : str
            ``"issue"`` or ``"return"``.
        transaction_date : str
            ISO timestamp of the event.
        """
        cursor.execute(
            """
            INSERT INTO transactions (book_id, member_id, transaction_type, transaction_date)
            VALUES (?, ?, ?, ?)
            """,
            (book_id, member_id, transaction_type, transaction_date),
        )
        return TransactionRead(
            id=cursor.lastrowid,
            book_id=book_id,
            member_id=member_id,
            transaction_type=transaction_type,
            transaction_date=transaction_date,
        )

    async def list_transactions(
        self,
        book_id: Optional[str] = None,
        member_id: Optional[str] = None,
        transaction_type: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[TransactionRead]:
        """Retrieve ledger rows with optional filters and pagination.

        Filtering by book, member or type reduces the result set.
        Sorting is always by ``transaction_date`` descending, newest
        first.
        """
        where_clauses: List[str] = []
        params: List[Any] = []
        if book_id:
            where_clauses.append("book_id = ?")
            params.append(book_id)
        if member_id:
            where_clauses.append("member_id = ?")
            params.append(member_id)
        if transaction_type:
            where_clauses.append("transaction_type = ?")
            params.append(transaction_type)
        query = f"SELECT {TRANSACTION_COLUMNS} FROM transactions"
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        query += " ORDER BY transaction_date DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])
        return self._select(query, tuple(params))

    async def get_transaction(self, transaction_id: int) -> TransactionRead:
        rows = self._select(
            f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE id = ?",
            (transaction_id,),
        )
        if not rows:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return rows[0]

    async def book_history(self, book_id: str) -> List[TransactionRead]:
        """Return the full ledger of one book in the order it happened."""
        return self._select(
            f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE book_id = ? "
            "ORDER BY transaction_date ASC, id ASC",
            (book_id,),
        )

    def _select(self, query: str, params: tuple) -> List[TransactionRead]:
        try:
            with self.db.cursor() as cursor:
                rows = cursor.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            logger.exception("Failed to read transactions")
            raise StoreError("An error occurred while fetching transactions") from exc
        return [TransactionRead.model_validate(dict(row)) for row in rows]
