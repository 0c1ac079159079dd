"""
Request and response bodies for issuing and returning books.
"""

from datetime import date
from typing import Optional

from pydantic import Field

from .base import CamelModel
from .book import BookRead
from .loan import LoanRead
from .transaction import TransactionRead


class IssueRequest(CamelModel):
    """Borrower details for an issue.

    ``mobile``, ``borrower`` and ``due_date`` are required; the
    circulation service rejects a request missing any of them before
    touching the store.
    """

    mobile: Optional[str] = Field(None, examples=["555-0100"])
    borrower: Optional[str] = Field(None, examples=["Alice"])
    due_date: Optional[date] = Field(None, examples=["2024-01-01"])


class ReturnRequest(CamelModel):
    """Identity of the person returning a book.  At least one field is required."""

    borrower_name: Optional[str] = Field(None, examples=["Alice"])
    mobile: Optional[str] = Field(None, examples=["555-0100"])


class IssueResult(CamelModel):
    message: str = "Book issued successfully"
    book: BookRead
    transaction: TransactionRead
    loan: LoanRead
    due_date: date


class ReturnResult(CamelModel):
    message: str = "Book returned successfully and member details updated"
    book: BookRead
    transaction: TransactionRead
    loan: Optional[LoanRead] = None
