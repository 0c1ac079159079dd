"""
Book endpoints for API v1.

These routes cover the inventory (add, list, look up) and the
circulation operations (issue, return, delete).  Status changes are
delegated to ``CirculationService``; errors raised by the services are
rendered by the handler registered in ``create_app``.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, status

from library_circulation_api.app.api.deps import (
    get_book_service,
    get_circulation_service,
    get_transaction_service,
)
from library_circulation_api.app.schemas.book import BookCreate, BookRead
from library_circulation_api.app.schemas.circulation import (
    IssueRequest,
    IssueResult,
    ReturnRequest,
    ReturnResult,
)
from library_circulation_api.app.schemas.transaction import TransactionRead
from library_circulation_api.app.services.book_service import BookService
from library_circulation_api.app.services.circulation_service import CirculationService
from library_circulation_api.app.services.transaction_service import TransactionService


router = APIRouter()


@router.post("/", response_model=BookRead, status_code=status.HTTP_201_CREATED)
async def add_book(
    book: BookCreate | None = None,
    service: BookService = Depends(get_book_service),
) -> BookRead:
    """Add a book to the inventory.  New books start out ``available``."""
    return await service.add_book(book or BookCreate())


@router.get("/", response_model=List[BookRead])
async def list_books(service: BookService = Depends(get_book_service)) -> List[BookRead]:
    return await service.list_books()


@router.get("/available", response_model=List[BookRead])
async def list_available_books(service: BookService = Depends(get_book_service)) -> List[BookRead]:
    """List books that can be issued.  Returns 404 when none are available."""
    return await service.list_available_books()


@router.get("/{isbn}", response_model=BookRead)
async def get_book(
    isbn: str = Path(..., description="ISBN of the book"),
    service: BookService = Depends(get_book_service),
) -> BookRead:
    return await service.get_book(isbn)


@router.get("/{isbn}/transactions", response_model=List[TransactionRead])
async def get_book_transactions(
    isbn: str = Path(..., description="ISBN of the book"),
    service: TransactionService = Depends(get_transaction_service),
) -> List[TransactionRead]:
    """Return the issue/return history of a book, oldest first."""
    return await service.book_history(isbn)


@router.post("/issue/{isbn}", response_model=IssueResult)
async def issue_book(
    isbn: str = Path(..., description="ISBN of the book to issue"),
    payload: IssueRequest | None = None,
    service: CirculationService = Depends(get_circulation_service),
) -> IssueResult:
    """Issue an available book to a borrower.

    The body must carry ``mobile``, ``borrower`` and ``dueDate``.
    Responds 400 if any is missing, 404 for an unknown ISBN and 409 if
    the book is already borrowed.
    """
    return await service.issue_book(isbn, payload or IssueRequest())


@router.post("/return/{isbn}", response_model=ReturnResult)
async def return_book(
    isbn: str = Path(..., description="ISBN of the book being returned"),
    payload: ReturnRequest | None = None,
    service: CirculationService = Depends(get_circulation_service),
) -> ReturnResult:
    """Return a borrowed book.

    The body must carry ``borrowerName`` or ``mobile``.  Responds 409 if
    the book was not borrowed and 500 with ``inconsistent_state`` if the
    book was returned but its member record is missing.
    """
    return await service.return_book(isbn, payload or ReturnRequest())


@router.delete("/delete/{isbn}")
async def delete_book(
    isbn: str = Path(..., description="ISBN of the book to delete"),
    service: CirculationService = Depends(get_circulation_service),
) -> dict:
    """Delete an available book.  Borrowed books are rejected with 409."""
    deleted = await service.delete_book(isbn)
    return {"message": "Book deleted successfully", "deletedCount": deleted}
