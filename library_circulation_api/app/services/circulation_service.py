"""
Book circulation state machine.

``CirculationService`` is the only writer of ``books.status`` and
``books.borrower`` and the only writer of the transaction ledger.  A
book moves between two states::

    available --issue--> borrowed --return--> available

Each transition runs in two steps on one connection:

1. The primary write: a conditional ``UPDATE`` that changes the status
   only if the book is still in the expected state.  It runs under
   ``BEGIN IMMEDIATE`` so concurrent requests for the same book queue
   on the SQLite write lock and the loser sees zero updated rows and
   gets a ``ConflictError``.  Nothing has been written if this step
   fails.
2. The dependent writes (ledger row, loan, member) in a second
   transaction.  The status change is already committed at this point,
   so a failure here is raised as ``InconsistentStateError`` instead of
   being dropped.
"""

import logging
import sqlite3
from typing import Optional

from library_circulation_api.app.core.db import Database, utc_now
from library_circulation_api.app.core.errors import (
    ConflictError,
    InconsistentStateError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from library_circulation_api.app.schemas.book import BookRead
from library_circulation_api.app.schemas.circulation import (
    IssueRequest,
    IssueResult,
    ReturnRequest,
    ReturnResult,
)
from library_circulation_api.app.services.book_service import BOOK_COLUMNS
from library_circulation_api.app.services.loan_service import LoanService
from library_circulation_api.app.services.member_service import MemberService
from library_circulation_api.app.services.transaction_service import TransactionService


logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class CirculationService:
    """Issue, return and delete books while keeping book, loan, member and ledger in step."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def issue_book(self, isbn: str, request: IssueRequest) -> IssueResult:
        """Lend an available book.

        Raises ``ValidationError`` if ``mobile``, ``borrower`` or
        ``due_date`` is missing, ``NotFoundError`` for an unknown ISBN
        and ``ConflictError`` if the book is already borrowed.  On
        success the book, the new ``issue`` transaction and the opened
        loan are returned together with the echoed due date.
        """
        mobile = _clean(request.mobile)
        borrower = _clean(request.borrower)
        if not mobile or not borrower or request.due_date is None:
            raise ValidationError("Missing required fields: mobile, borrower and dueDate")

        issued_at = utc_now()
        conn = self.db.connect()
        try:
            cursor = conn.cursor()
            book = self._transition(
                conn,
                cursor,
                isbn,
                "UPDATE books SET status = 'borrowed', borrower = ?, updated_at = ? "
                "WHERE isbn = ? AND status = 'available'",
                (borrower, issued_at, isbn),
                conflict_message="Book is already borrowed",
            )

            try:
                transaction = TransactionService.append(cursor, isbn, mobile, "issue", issued_at)
                member_id = MemberService.attach_loan(cursor, borrower, mobile, isbn, issued_at)
                loan = LoanService.open_loan(
                    cursor, isbn, member_id, borrower, mobile, issued_at, request.due_date
                )
                conn.commit()
            except sqlite3.Error as exc:
                conn.rollback()
                logger.exception("Book %s was issued but the ledger entry could not be written", isbn)
                raise InconsistentStateError(
                    f"Book {isbn} was marked borrowed but its transaction could not be recorded"
                ) from exc
        finally:
            conn.close()

        logger.info("Issued book %s to %s (%s), due %s", isbn, borrower, mobile, request.due_date)
        return IssueResult(
            book=book,
            transaction=transaction,
            loan=loan,
            due_date=request.due_date,
        )

    async def return_book(self, isbn: str, request: ReturnRequest) -> ReturnResult:
        """Take a borrowed book back into the available inventory.

        Raises ``ValidationError`` if neither ``borrower_name`` nor
        ``mobile`` is given, ``NotFoundError`` for an unknown ISBN and
        ``ConflictError`` if the book is not borrowed.  The active loan
        is closed and a ``return`` transaction appended.  If no member
        is attached to the loan the book still ends up available, but
        ``InconsistentStateError`` is raised so the caller knows.
        """
        borrower_name = _clean(request.borrower_name)
        mobile = _clean(request.mobile)
        if not borrower_name and not mobile:
            raise ValidationError("Either borrower name or mobile number is required")

        returned_at = utc_now()
        conn = self.db.connect()
        try:
            cursor = conn.cursor()
            book = self._transition(
                conn,
                cursor,
                isbn,
                "UPDATE books SET status = 'available', borrower = NULL, updated_at = ? "
                "WHERE isbn = ? AND status = 'borrowed'",
                (returned_at, isbn),
                conflict_message="Book was not borrowed",
            )

            try:
                loan = LoanService.close_loan(cursor, isbn, returned_at)
                ledger_member = mobile or (loan.mobile if loan else None) or borrower_name
                transaction = TransactionService.append(
                    cursor, isbn, ledger_member, "return", returned_at
                )
                member = MemberService.record_return(
                    cursor,
                    loan.member_id if loan else None,
                    isbn,
                    borrower_name,
                    mobile,
                    returned_at,
                )
                conn.commit()
            except sqlite3.Error as exc:
                conn.rollback()
                logger.exception("Book %s was returned but the ledger entry could not be written", isbn)
                raise InconsistentStateError(
                    f"Book {isbn} was marked available but its transaction could not be recorded"
                ) from exc
        finally:
            conn.close()

        if member is None:
            logger.error("Book %s returned but no member is attached to its loan", isbn)
            raise InconsistentStateError("Member not found for this book")

        logger.info("Returned book %s from member %s", isbn, member.id)
        return ReturnResult(book=book, transaction=transaction, loan=loan)

    async def delete_book(self, isbn: str) -> int:
        """Remove an available book from the inventory and return the deleted count.

        Borrowed books cannot be deleted (``ConflictError``); the ledger
        and loan history of a deleted book are kept.
        """
        conn = self.db.connect()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute("BEGIN IMMEDIATE")
                cursor.execute(
                    "DELETE FROM books WHERE isbn = ? AND status = 'available'",
                    (isbn,),
                )
                deleted = cursor.rowcount
                if deleted == 0:
                    conn.rollback()
                    self._reject(cursor, isbn, "Book is currently borrowed and cannot be deleted")
                conn.commit()
            except sqlite3.Error as exc:
                conn.rollback()
                logger.exception("Failed to delete book %s", isbn)
                raise StoreError("An error occurred while deleting the book") from exc
        finally:
            conn.close()
        logger.info("Deleted book %s", isbn)
        return deleted

    def _transition(
        self,
        conn: sqlite3.Connection,
        cursor: sqlite3.Cursor,
        isbn: str,
        update_sql: str,
        params: tuple,
        conflict_message: str,
    ) -> BookRead:
        """Run the conditional status update and commit it.

        Returns the book as stored after the update.
        """
        try:
            cursor.execute("BEGIN IMMEDIATE")
            cursor.execute(update_sql, params)
            if cursor.rowcount == 0:
                conn.rollback()
                self._reject(cursor, isbn, conflict_message)
            row = cursor.execute(
                f"SELECT {BOOK_COLUMNS} FROM books WHERE isbn = ?", (isbn,)
            ).fetchone()
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.exception("Status update for book %s failed", isbn)
            raise StoreError("An error occurred while updating the book") from exc
        return BookRead.model_validate(dict(row))

    @staticmethod
    def _reject(cursor: sqlite3.Cursor, isbn: str, conflict_message: str) -> None:
        """Raise the error explaining why a conditional write matched no row."""
        row = cursor.execute("SELECT status FROM books WHERE isbn = ?", (isbn,)).fetchone()
        if not row:
            raise NotFoundError("Book not found")
        logger.info("Rejected change to book %s in status %s: %s", isbn, row["status"], conflict_message)
        raise ConflictError(conflict_message)
