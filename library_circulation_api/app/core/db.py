"""
SQLite record store and simple migration system.

The ``Database`` class is the store handle shared by all services.  It
is created once by ``create_app`` (or by a test), initialised with
``init`` at startup and afterwards only used to open short lived
connections, one per unit of work.  SQLite serialises writers, which
is what the circulation service relies on for its conditional updates.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from .config import settings


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS books (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            isbn TEXT NOT NULL UNIQUE,
            title TEXT NOT NULL,
            author TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'available',
            borrower TEXT,
            created_at TIMESTAMP,
            updated_at TIMESTAMP,
            -- borrower is set exactly while the book is out
            CHECK (
                (status = 'borrowed' AND borrower IS NOT NULL AND borrower <> '')
                OR (status = 'available' AND borrower IS NULL)
            )
        );

        CREATE TABLE IF NOT EXISTS members (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            mobile TEXT NOT NULL,
            email TEXT,
            book_id TEXT,
            issue_date TIMESTAMP,
            created_at TIMESTAMP,
            updated_at TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS transactions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            book_id TEXT NOT NULL,
            member_id TEXT NOT NULL,
            transaction_type TEXT NOT NULL CHECK (transaction_type IN ('issue', 'return')),
            transaction_date TIMESTAMP NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_books_status ON books(status);
        CREATE INDEX IF NOT EXISTS idx_members_book_id ON members(book_id);
        CREATE INDEX IF NOT EXISTS idx_members_mobile ON members(mobile);
        CREATE INDEX IF NOT EXISTS idx_transactions_book_id ON transactions(book_id);
        """,
    ),
    # Migration 2: Loans table linking a book to the member holding it
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS loans (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            book_id TEXT NOT NULL,
            member_id INTEGER,
            borrower TEXT NOT NULL,
            mobile TEXT NOT NULL,
            issue_date TIMESTAMP NOT NULL,
            due_date DATE NOT NULL,
            return_date TIMESTAMP,
            FOREIGN KEY(member_id) REFERENCES members(id) ON DELETE SET NULL
        );

        -- A book can be out on at most one loan at a time.
        CREATE UNIQUE INDEX IF NOT EXISTS idx_loans_active_book
            ON loans(book_id) WHERE return_date IS NULL;
        CREATE INDEX IF NOT EXISTS idx_loans_member_id ON loans(member_id);
        CREATE INDEX IF NOT EXISTS idx_loans_due_date ON loans(due_date);
        """,
    ),
]


def utc_now() -> str:
    """Current UTC time as the ISO string stored in timestamp columns."""
    return datetime.now(timezone.utc).isoformat()


def get_database_path(db_url: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    If the configured path is absolute, use it directly.  Otherwise
    resolve it relative to the project root.
    """
    db_url = db_url or settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # library_circulation_api/
    return str((base_dir / db_url).resolve())


class Database:
    """Handle to the SQLite file holding books, members, loans and transactions."""

    def __init__(self, path: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.path = get_database_path(path)
        self.timeout = settings.database_timeout if timeout is None else timeout

    def connect(self) -> sqlite3.Connection:
        """Create and return a new SQLite connection.

        Rows are returned as ``sqlite3.Row`` so columns can be accessed
        by name.  Foreign keys are enabled per connection because SQLite
        turns them off by default.
        """
        conn = sqlite3.connect(self.path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Context manager that yields a cursor, commits and closes on exit."""
        conn = self.connect()
        try:
            yield conn.cursor()
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init(self) -> None:
        """Create the database file and apply pending migrations.

        If you add a new migration, append it to ``MIGRATIONS`` with an
        incremented version number.
        """
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        with self.cursor() as cursor:
            # WAL lets readers proceed while a writer holds the lock.
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) as version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    cursor.executescript(sql)
                    cursor.execute(
                        "INSERT INTO migrations (version) VALUES (?)", (version,)
                    )
                    current_version = version
