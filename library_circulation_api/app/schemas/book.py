"""
Pydantic models for books.

A book is identified by its ISBN on the wire (``ISBN``, as in the
catalogue documents) and by an internal integer ``id`` in the store.
Its ``status`` is either ``available`` or ``borrowed``; ``borrower``
holds the name of the current holder while the book is out.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel


BookStatus = Literal["available", "borrowed"]


class BookBase(CamelModel):
    title: Optional[str] = Field(None, examples=["The Pragmatic Programmer"])
    author: Optional[str] = Field(None, examples=["Andrew Hunt"])
    isbn: Optional[str] = Field(None, alias="ISBN", examples=["9780201616224"])


class BookCreate(BookBase):
    """Schema for adding a book to the inventory.

    All three fields are required; the service rejects missing or blank
    values with a validation error rather than leaving it to request
    parsing, so API clients get the same error shape as for issue and
    return.
    """
    pass


class BookRead(BookBase):
    id: int
    title: str
    author: str
    isbn: str = Field(..., alias="ISBN")
    status: BookStatus = "available"
    borrower: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
