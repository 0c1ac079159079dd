"""
Business logic for library members.

Members are durable borrower profiles.  Administrative operations here
(add, list, update, delete) are plain record edits.  The member that
"belongs" to a book is the one attached to the book's active loan, so
updates and deletes addressed by book id resolve the member through
``loans``.  The two static helpers at the bottom are used by
``CirculationService`` inside its own database transactions.
"""

import logging
import sqlite3
from typing import List, Optional

from library_circulation_api.app.core.db import Database, utc_now
from library_circulation_api.app.core.errors import NotFoundError, StoreError, ValidationError
from library_circulation_api.app.schemas.member import MemberCreate, MemberRead, MemberUpdate


logger = logging.getLogger(__name__)

MEMBER_COLUMNS = "id, name, mobile, email, book_id, issue_date, created_at, updated_at"

# Member attached to the active loan of a book.
ACTIVE_MEMBER_QUERY = (
    "SELECT m.id, m.name, m.mobile, m.email, m.book_id, m.issue_date, m.created_at, m.updated_at "
    "FROM loans l JOIN members m ON m.id = l.member_id "
    "WHERE l.book_id = ? AND l.return_date IS NULL"
)


class MemberService:
    """Service for managing member profiles."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def create_member(self, data: MemberCreate) -> MemberRead:
        """Register a new member.

        ``name``, ``mobile`` and ``email`` are required.
        """
        name = (data.name or "").strip()
        mobile = (data.mobile or "").strip()
        email = (data.email or "").strip()
        if not name or not mobile or not email:
            raise ValidationError("All fields (name, mobile, email) are required")
        now = utc_now()
        try:
            with self.db.cursor() as cursor:
                cursor.execute(
                    "INSERT INTO members (name, mobile, email, created_at, updated_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (name, mobile, email, now, now),
                )
                member_id = cursor.lastrowid
        except sqlite3.Error as exc:
            logger.exception("Failed to add member %s", mobile)
            raise StoreError("An error occurred while adding the new member") from exc
        logger.info("Registered member %s (%s)", member_id, mobile)
        return MemberRead(
            id=member_id,
            name=name,
            mobile=mobile,
            email=email,
            created_at=now,
            updated_at=now,
        )

    async def list_members(self) -> List[MemberRead]:
        """Return all members; an empty table is reported as ``NotFoundError``."""
        try:
            with self.db.cursor() as cursor:
                rows = cursor.execute(
                    f"SELECT {MEMBER_COLUMNS} FROM members ORDER BY id"
                ).fetchall()
        except sqlite3.Error as exc:
            logger.exception("Failed to list members")
            raise StoreError("An error occurred while fetching members") from exc
        if not rows:
            raise NotFoundError("No members are available")
        return [MemberRead.model_validate(dict(row)) for row in rows]

    async def get_member_for_book(self, book_id: str) -> MemberRead:
        """Return the member on the active loan of ``book_id``.

        Raises ``NotFoundError`` when the book is not on loan or its
        borrower's record has been deleted.
        """
        try:
            with self.db.cursor() as cursor:
                row = cursor.execute(ACTIVE_MEMBER_QUERY, (book_id,)).fetchone()
        except sqlite3.Error as exc:
            logger.exception("Failed to fetch member for book %s", book_id)
            raise StoreError("An error occurred while fetching the member") from exc
        if not row:
            raise NotFoundError("Member not found")
        return MemberRead.model_validate(dict(row))

    async def update_member(self, book_id: str, data: MemberUpdate) -> MemberRead:
        """Update the contact details of the member currently holding ``book_id``.

        Omitted or blank fields keep their stored value.
        """
        name = (data.name or "").strip() or None
        mobile = (data.mobile or "").strip() or None
        try:
            with self.db.cursor() as cursor:
                row = cursor.execute(ACTIVE_MEMBER_QUERY, (book_id,)).fetchone()
                if not row:
                    raise NotFoundError("Member not found")
                cursor.execute(
                    "UPDATE members SET name = COALESCE(?, name), mobile = COALESCE(?, mobile), "
                    "updated_at = ? WHERE id = ?",
                    (name, mobile, utc_now(), row["id"]),
                )
                updated = cursor.execute(
                    f"SELECT {MEMBER_COLUMNS} FROM members WHERE id = ?",
                    (row["id"],),
                ).fetchone()
        except sqlite3.Error as exc:
            logger.exception("Failed to update member for book %s", book_id)
            raise StoreError("An error occurred while updating the member") from exc
        logger.info("Updated member %s", updated["id"])
        return MemberRead.model_validate(dict(updated))

    async def delete_member(self, book_id: str) -> str:
        """Delete the member currently holding ``book_id`` and echo the book id.

        The member's loans stay in place with ``member_id`` set to null,
        which a later return of the book reports as an inconsistency.
        """
        try:
            with self.db.cursor() as cursor:
                row = cursor.execute(ACTIVE_MEMBER_QUERY, (book_id,)).fetchone()
                if not row:
                    raise NotFoundError("Member not found for the provided bookId")
                cursor.execute("DELETE FROM members WHERE id = ?", (row["id"],))
        except sqlite3.Error as exc:
            logger.exception("Failed to delete member for book %s", book_id)
            raise StoreError("An error occurred while deleting the member") from exc
        logger.warning("Deleted member %s holding book %s", row["id"], book_id)
        return book_id

    @staticmethod
    def attach_loan(
        cursor: sqlite3.Cursor,
        name: str,
        mobile: str,
        book_id: str,
        issue_date: str,
    ) -> int:
        """Point the member with ``mobile`` at ``book_id``, creating it if needed.

        Returns the member id.  The stored name of an existing member is
        left alone.
        """
        row = cursor.execute(
            "SELECT id FROM members WHERE mobile = ? ORDER BY id LIMIT 1",
            (mobile,),
        ).fetchone()
        if row:
            cursor.execute(
                "UPDATE members SET book_id = ?, issue_date = ?, updated_at = ? WHERE id = ?",
                (book_id, issue_date, issue_date, row["id"]),
            )
            return row["id"]
        cursor.execute(
            "INSERT INTO members (name, mobile, email, book_id, issue_date, created_at, updated_at) "
            "VALUES (?, ?, NULL, ?, ?, ?, ?)",
            (name, mobile, book_id, issue_date, issue_date, issue_date),
        )
        return cursor.lastrowid

    @staticmethod
    def record_return(
        cursor: sqlite3.Cursor,
        member_id: Optional[int],
        book_id: str,
        name: Optional[str],
        mobile: Optional[str],
        returned_at: str,
    ) -> Optional[MemberRead]:
        """Apply the returner's contact details and detach ``book_id``.

        Returns ``None`` when no member record exists.
        """
        if member_id is None:
            return None
        cursor.execute(
            """
            UPDATE members SET
                name = COALESCE(?, name),
                mobile = COALESCE(?, mobile),
                issue_date = CASE WHEN book_id = ? THEN NULL ELSE issue_date END,
                book_id = CASE WHEN book_id = ? THEN NULL ELSE book_id END,
                updated_at = ?
            WHERE id = ?
            """,
            (name, mobile, book_id, book_id, returned_at, member_id),
        )
        if cursor.rowcount == 0:
            return None
        row = cursor.execute(
            f"SELECT {MEMBER_COLUMNS} FROM members WHERE id = ?",
            (member_id,),
        ).fetchone()
        return MemberRead.model_validate(dict(row))
