"""
FastAPI dependencies giving handlers access to the store and services.

The ``Database`` handle is created by ``create_app`` and kept on
``app.state``; every request builds lightweight service objects around
it.
"""

from fastapi import Depends, Request

from library_circulation_api.app.core.db import Database
from library_circulation_api.app.services.book_service import BookService
from library_circulation_api.app.services.circulation_service import CirculationService
from library_circulation_api.app.services.loan_service import LoanService
from library_circulation_api.app.services.member_service import MemberService
from library_circulation_api.app.services.transaction_service import TransactionService


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_book_service(db: Database = Depends(get_db)) -> BookService:
    return BookService(db)


def get_circulation_service(db: Database = Depends(get_db)) -> CirculationService:
    return CirculationService(db)


def get_member_service(db: Database = Depends(get_db)) -> MemberService:
    return MemberService(db)


def get_loan_service(db: Database = Depends(get_db)) -> LoanService:
    return LoanService(db)


def get_transaction_service(db: Database = Depends(get_db)) -> TransactionService:
    return TransactionService(db)
