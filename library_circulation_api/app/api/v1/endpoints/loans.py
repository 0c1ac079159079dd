"""
Loan endpoints for API v1.

Read-only views over loans: all loans, active loans and overdue loans.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from library_circulation_api.app.api.deps import get_loan_service
from library_circulation_api.app.schemas.loan import LoanRead
from library_circulation_api.app.services.loan_service import LoanService


router = APIRouter()


@router.get("/", response_model=List[LoanRead])
async def list_loans(
    active: bool = Query(False, description="Only loans whose book has not come back"),
    service: LoanService = Depends(get_loan_service),
) -> List[LoanRead]:
    return await service.list_loans(active_only=active)


@router.get("/overdue", response_model=List[LoanRead])
async def list_overdue_loans(
    as_of: Optional[date] = Query(None, alias="asOf", description="Reference date, defaults to today"),
    service: LoanService = Depends(get_loan_service),
) -> List[LoanRead]:
    """Active loans whose due date has passed."""
    return await service.overdue_loans(as_of)
