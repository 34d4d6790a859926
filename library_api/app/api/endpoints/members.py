"""
Member endpoints.

Create, read, list, update and delete library members.  Deleting a
member goes through the circulation service so that the member's open
reservations are cancelled in the same step.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from library_api.app.models.member import Member
from library_api.app.schemas.common import MessageResponse
from library_api.app.schemas.member import MEMBER_ID_MESSAGE, MemberCreate, MemberList, MemberRead, MemberUpdate
from library_api.app.services.container import ServiceContainer

from ..deps import get_services, parse_id

router = APIRouter()


def _not_found(member_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"member with id: {member_id} was not found")


@router.post("", response_model=MemberRead)
async def create_member(
    member: MemberCreate,
    services: ServiceContainer = Depends(get_services),
) -> Member:
    """Register a member.

    Responds 200 with the stored member.  A duplicate ``member_id``
    yields 400 ``"member with id: X already exists"``.
    """
    return services.members.create_member(member.model_dump(exclude_none=True))


@router.get("", response_model=MemberList)
async def list_members(services: ServiceContainer = Depends(get_services)) -> dict:
    return {"members": services.members.get_all_members()}


@router.get("/{member_id}", response_model=MemberRead)
async def get_member(member_id: str, services: ServiceContainer = Depends(get_services)) -> Member:
    member_key = parse_id(member_id, MEMBER_ID_MESSAGE)
    member = services.members.get_member(member_key)
    if member is None:
        raise _not_found(member_key)
    return member


@router.put("/{member_id}", response_model=MemberRead)
async def update_member(
    member_id: str,
    updates: MemberUpdate,
    services: ServiceContainer = Depends(get_services),
) -> Member:
    """Apply a partial update; fields left out of the body are unchanged."""
    member_key = parse_id(member_id, MEMBER_ID_MESSAGE)
    member = services.members.update_member(member_key, updates.model_dump(exclude_none=True))
    if member is None:
        raise _not_found(member_key)
    return member


@router.delete("/{member_id}", response_model=MessageResponse)
async def delete_member(member_id: str, services: ServiceContainer = Depends(get_services)) -> dict:
    """Delete a member.

    Rejected with 400 while the member has a book on loan.
    """
    member_key = parse_id(member_id, MEMBER_ID_MESSAGE)
    services.circulation.delete_member(member_key)
    return {"message": f"member with id: {member_key} has been deleted successfully"}
