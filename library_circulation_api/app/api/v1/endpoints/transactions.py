"""
Ledger endpoints for API v1.

Transactions are written only by issue and return; these routes expose
them read-only with optional filters and pagination.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from library_circulation_api.app.api.deps import get_transaction_service
from library_circulation_api.app.schemas.transaction import TransactionRead, TransactionType
from library_circulation_api.app.services.transaction_service import TransactionService


router = APIRouter()


@router.get("/", response_model=List[TransactionRead])
async def list_transactions(
    book_id: Optional[str] = Query(None, alias="bookId"),
    member_id: Optional[str] = Query(None, alias="memberId"),
    transaction_type: Optional[TransactionType] = Query(None, alias="transactionType"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: TransactionService = Depends(get_transaction_service),
) -> List[TransactionRead]:
    """List ledger entries, newest first."""
    return await service.list_transactions(
        book_id=book_id,
        member_id=member_id,
        transaction_type=transaction_type,
        limit=limit,
        offset=offset,
    )


@router.get("/{transaction_id}", response_model=TransactionRead)
async def get_transaction(
    transaction_id: int = Path(..., description="ID of the ledger entry"),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionRead:
    return await service.get_transaction(transaction_id)
