"""
Business logic for loans.

A loan row is opened when a book is issued and closed when it comes
back.  Opening and closing happen inside ``CirculationService`` through
the static helpers below; the instance methods are the read side used
for loan listings and overdue reports.
"""

import logging
import sqlite3
from datetime import date
from typing import List, Optional

from library_circulation_api.app.core.db import Database
from library_circulation_api.app.core.errors import StoreError
from library_circulation_api.app.schemas.loan import LoanRead


logger = logging.getLogger(__name__)

LOAN_COLUMNS = "id, book_id, member_id, borrower, mobile, issue_date, due_date, return_date"


class LoanService:
    """Service for opening, closing and listing loans."""

    def __init__(self, db: Database) -> None:
        self.db = db

    @staticmethod
    def open_loan(
        cursor: sqlite3.Cursor,
        book_id: str,
        member_id: int,
        borrower: str,
        mobile: str,
        issue_date: str,
        due_date: date,
    ) -> LoanRead:
        cursor.execute(
            "INSERT INTO loans (book_id, member_id, borrower, mobile, issue_date, due_date) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (book_id, member_id, borrower, mobile, issue_date, due_date.isoformat()),
        )
        return LoanRead(
            id=cursor.lastrowid,
            book_id=book_id,
            member_id=member_id,
            borrower=borrower,
            mobile=mobile,
            issue_date=issue_date,
            due_date=due_date,
        )

    @staticmethod
    def close_loan(cursor: sqlite3.Cursor, book_id: str, return_date: str) -> Optional[LoanRead]:
        """Stamp ``return_date`` on the active loan of a book.

        Returns the closed loan, or ``None`` if the book had no active
        loan (for example books marked borrowed before loans existed).
        """
        row = cursor.execute(
            f"SELECT {LOAN_COLUMNS} FROM loans WHERE book_id = ? AND return_date IS NULL",
            (book_id,),
        ).fetchone()
        if not row:
            return None
        cursor.execute(
            "UPDATE loans SET return_date = ? WHERE id = ?",
            (return_date, row["id"]),
        )
        loan = dict(row)
        loan["return_date"] = return_date
        return LoanRead.model_validate(loan)

    async def list_loans(self, active_only: bool = False) -> List[LoanRead]:
        """Return loans, newest first.  ``active_only`` hides returned loans."""
        query = f"SELECT {LOAN_COLUMNS} FROM loans"
        if active_only:
            query += " WHERE return_date IS NULL"
        query += " ORDER BY issue_date DESC, id DESC"
        return self._select(query, ())

    async def overdue_loans(self, as_of: Optional[date] = None) -> List[LoanRead]:
        """Return active loans whose due date is before ``as_of`` (default today)."""
        as_of = as_of or date.today()
        return self._select(
            f"SELECT {LOAN_COLUMNS} FROM loans WHERE return_date IS NULL AND due_date < ? "
            "ORDER BY due_date ASC, id ASC",
            (as_of.isoformat(),),
        )

    def _select(self, query: str, params: tuple) -> List[LoanRead]:
        try:
            with self.db.cursor() as cursor:
                rows = cursor.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            logger.exception("Failed to read loans")
            raise StoreError("An error occurred while fetching loans") from exc
        return [LoanRead.model_validate(dict(row)) for row in rows]
