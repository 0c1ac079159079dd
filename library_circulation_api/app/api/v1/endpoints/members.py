"""
Member endpoints for API v1.

Registration, listing, and the lookup, update and delete of the
member currently holding a given book.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, status

from library_circulation_api.app.api.deps import get_member_service
from library_circulation_api.app.schemas.member import MemberCreate, MemberRead, MemberUpdate
from library_circulation_api.app.services.member_service import MemberService


router = APIRouter()


@router.get("/", response_model=List[MemberRead])
async def list_members(service: MemberService = Depends(get_member_service)) -> List[MemberRead]:
    """List all members.  Returns 404 when there are none."""
    return await service.list_members()


@router.post("/add", status_code=status.HTTP_201_CREATED)
async def add_member(
    member: MemberCreate | None = None,
    service: MemberService = Depends(get_member_service),
) -> dict:
    """Register a member.  ``name``, ``mobile`` and ``email`` are required."""
    created = await service.create_member(member or MemberCreate())
    return {
        "message": "New library member added successfully",
        "member": created.model_dump(mode="json", by_alias=True),
    }


@router.get("/{book_id}", response_model=MemberRead)
async def get_member_for_book(
    book_id: str = Path(..., description="ISBN of the book the member currently holds"),
    service: MemberService = Depends(get_member_service),
) -> MemberRead:
    """Look up who holds a book.  Returns 404 when it is not on loan."""
    return await service.get_member_for_book(book_id)


@router.put("/update/{book_id}")
async def update_member(
    book_id: str = Path(..., description="ISBN of the book the member currently holds"),
    update: MemberUpdate | None = None,
    service: MemberService = Depends(get_member_service),
) -> dict:
    """Change the name and/or mobile of the member holding ``book_id``."""
    member = await service.update_member(book_id, update or MemberUpdate())
    return {
        "message": "Member details updated successfully",
        "member": member.model_dump(mode="json", by_alias=True),
    }


@router.delete("/delete/{book_id}")
async def delete_member(
    book_id: str = Path(..., description="ISBN of the book the member currently holds"),
    service: MemberService = Depends(get_member_service),
) -> dict:
    deleted_for = await service.delete_member(book_id)
    return {"message": "Member deleted successfully", "bookId": deleted_for}
