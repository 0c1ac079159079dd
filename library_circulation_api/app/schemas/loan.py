"""
Pydantic models for loans.

A loan covers one lending period of one book: it is opened by an issue
and closed by the matching return.  Unlike the book record it keeps the
agreed ``due_date``, which is what overdue reports are built from.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import computed_field

from .base import CamelModel


class LoanRead(CamelModel):
    id: int
    book_id: str
    # ``None`` once the member record has been deleted.
    member_id: Optional[int] = None
    borrower: str
    mobile: str
    issue_date: datetime
    due_date: date
    return_date: Optional[datetime] = None

    @computed_field
    @property
    def active(self) -> bool:
        return self.return_date is None
