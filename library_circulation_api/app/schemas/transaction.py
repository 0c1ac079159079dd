"""
Pydantic models for ledger transactions.

Transactions are append-only: each issue or return of a book writes
exactly one row and nothing ever edits it afterwards.
"""

from datetime import datetime
from typing import Literal

from .base import CamelModel


TransactionType = Literal["issue", "return"]


class TransactionRead(CamelModel):
    id: int
    book_id: str
    # Mobile number of the borrower supplied at issue time.
    member_id: str
    transaction_type: TransactionType
    transaction_date: datetime
