"""
Business logic for the book inventory.

``BookService`` covers adding books and the read side of the catalogue.
Status changes are never made here; issuing, returning and deleting
books go through ``CirculationService`` so that every change is
checked against the book's current status.
"""

import logging
import sqlite3
from typing import List

from library_circulation_api.app.core.db import Database, utc_now
from library_circulation_api.app.core.errors import (
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from library_circulation_api.app.schemas.book import BookCreate, BookRead


logger = logging.getLogger(__name__)

BOOK_COLUMNS = "id, isbn, title, author, status, borrower, created_at, updated_at"


class BookService:
    """Service for adding and looking up books."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def add_book(self, data: BookCreate) -> BookRead:
        """Add a book to the inventory with status ``available``.

        Raises ``ValidationError`` when a field is missing and
        ``ConflictError`` when a book with the same ISBN already exists.
        """
        title = (data.title or "").strip()
        author = (data.author or "").strip()
        isbn = (data.isbn or "").strip()
        if not title or not author or not isbn:
            raise ValidationError("All fields (title, author, ISBN) are required")
        now = utc_now()
        try:
            with self.db.cursor() as cursor:
                cursor.execute(
                    "INSERT INTO books (isbn, title, author, status, borrower, created_at, updated_at) "
                    "VALUES (?, ?, ?, 'available', NULL, ?, ?)",
                    (isbn, title, author, now, now),
                )
                book_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            raise ConflictError(f"A book with ISBN {isbn} already exists") from exc
        except sqlite3.Error as exc:
            logger.exception("Failed to add book %s", isbn)
            raise StoreError("An error occurred while adding the book") from exc
        logger.info("Added book %s (%s)", isbn, title)
        return BookRead(
            id=book_id,
            isbn=isbn,
            title=title,
            author=author,
            status="available",
            borrower=None,
            created_at=now,
            updated_at=now,
        )

    async def get_book(self, isbn: str) -> BookRead:
        """Return the book with the given ISBN or raise ``NotFoundError``."""
        try:
            with self.db.cursor() as cursor:
                row = cursor.execute(
                    f"SELECT {BOOK_COLUMNS} FROM books WHERE isbn = ?",
                    (isbn,),
                ).fetchone()
        except sqlite3.Error as exc:
            logger.exception("Failed to fetch book %s", isbn)
            raise StoreError("An error occurred while fetching the book") from exc
        if not row:
            raise NotFoundError("No book is available with provided id")
        return BookRead.model_validate(dict(row))

    async def list_books(self) -> List[BookRead]:
        """Return every book in the inventory ordered by title."""
        return self._select("SELECT {cols} FROM books ORDER BY title, id", ())

    async def list_available_books(self) -> List[BookRead]:
        """Return all books that can currently be issued.

        An empty inventory of available books is reported as
        ``NotFoundError``.
        """
        books = self._select(
            "SELECT {cols} FROM books WHERE status = ? ORDER BY title, id",
            ("available",),
        )
        if not books:
            raise NotFoundError("No books are available")
        return books

    def _select(self, query: str, params: tuple) -> List[BookRead]:
        try:
            with self.db.cursor() as cursor:
                rows = cursor.execute(query.format(cols=BOOK_COLUMNS), params).fetchall()
        except sqlite3.Error as exc:
            logger.exception("Failed to list books")
            raise StoreError("An error occurred while fetching books") from exc
        return [BookRead.model_validate(dict(row)) for row in rows]
