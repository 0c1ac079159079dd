"""
Pydantic models for library members.

A member is a durable borrower profile.  ``book_id`` and
``issue_date`` describe the loan most recently issued to the member and
are cleared when that book comes back.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class MemberCreate(CamelModel):
    """Schema for registering a member.

    ``name``, ``mobile`` and ``email`` are all required.  They are
    declared optional here so that the service reports missing values
    with its own validation error.
    """

    name: Optional[str] = Field(None, examples=["Alice"])
    mobile: Optional[str] = Field(None, examples=["555-0100"])
    email: Optional[str] = Field(None, examples=["alice@example.com"])


class MemberUpdate(CamelModel):
    """Contact fields that may be changed; omitted fields are kept."""

    name: Optional[str] = None
    mobile: Optional[str] = None


class MemberRead(CamelModel):
    id: int
    name: str
    mobile: str
    email: Optional[str] = None
    book_id: Optional[str] = None
    issue_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
