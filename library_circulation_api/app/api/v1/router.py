"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers (books, members, loans,
transactions) under a unified prefix.  When new endpoints are added or
when new domains are introduced, update this file to include their
routers.
"""

from fastapi import APIRouter

from .endpoints import books, loans, members, transactions

router = APIRouter()

router.include_router(books.router, prefix="/books", tags=["books"])
router.include_router(members.router, prefix="/members", tags=["members"])
router.include_router(loans.router, prefix="/loans", tags=["loans"])
router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
