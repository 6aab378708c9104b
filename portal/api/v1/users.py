"""
User management endpoints (admin only)
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from portal.core.deps import get_db, require_roles
from portal.models.user import Role, User
from portal.schemas.user import AdminUserCreate, AdminUserUpdate, UserListResponse, UserOut
from portal.services.user_service import admin_create_user, admin_update_user, get_user, list_users

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users_endpoint(
    role: Optional[Role] = Query(None),
    search: Optional[str] = Query(None, description="Match on email or name"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN))
):
    users, total = list_users(db, role=role, search=search, skip=skip, limit=limit)
    return UserListResponse(items=[UserOut.model_validate(u) for u in users], total=total)


@router.post("", response_model=UserOut, status_code=201)
async def create_user_endpoint(
    data: AdminUserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN))
):
    """Create an account with any role, including admin"""
    return admin_create_user(db, data, current_user)


@router.get("/{user_id}", response_model=UserOut)
async def get_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN))
):
    return get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user_endpoint(
    user_id: int,
    data: AdminUserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN))
):
    """Update profile fields, role or active flag"""
    return admin_update_user(db, user_id, data, current_user)
