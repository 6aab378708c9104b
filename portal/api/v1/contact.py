"""
Contact form endpoints. Anyone may write; only admins read.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from portal.core.deps import get_db, get_optional_user, require_roles
from portal.models.user import Role, User
from portal.schemas.contact import ContactMessageCreate, ContactMessageListResponse, ContactMessageOut
from portal.services.contact_service import list_messages, submit_message

router = APIRouter()


@router.post("", response_model=ContactMessageOut, status_code=201)
async def submit_contact_endpoint(
    data: ContactMessageCreate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user)
):
    """Send a message to the portal staff. Signed-in senders are linked by user id."""
    return submit_message(db, data, current_user)


@router.get("", response_model=ContactMessageListResponse)
async def list_contact_endpoint(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN))
):
    messages, total = list_messages(db, skip=skip, limit=limit)
    return ContactMessageListResponse(
        items=[ContactMessageOut.model_validate(m) for m in messages],
        total=total,
    )
