"""
Authentication endpoints
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from portal.core.deps import get_db, get_current_user
from portal.core.security import create_access_token
from portal.models.user import User
from portal.schemas.auth import ChangePasswordRequest, LoginRequest, RegisterRequest, TokenResponse
from portal.schemas.user import ProfileUpdate, UserOut
from portal.services.audit_service import log_audit
from portal.services.user_service import authenticate, change_password, register_user, update_profile

router = APIRouter()
logger = logging.getLogger(__name__)


def _token_for(user: User) -> TokenResponse:
    # JWT 'sub' claim must be a string
    token_data = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
    }
    return TokenResponse(access_token=create_access_token(data=token_data), token_type="bearer")


@router.post("/register", response_model=UserOut, status_code=201)
async def register(
    data: RegisterRequest,
    db: Session = Depends(get_db)
):
    """Create a student or faculty account"""
    return register_user(db, data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT token

    Rejects unknown emails, wrong passwords and inactive accounts.
    """
    user = authenticate(db, login_data.email, login_data.password)

    log_audit(
        db=db,
        actor_id=user.id,
        action="AUTH_LOGIN_SUCCESS",
        entity_type="auth",
        entity_id=None,
        meta={"email": user.email, "role": user.role}
    )
    return _token_for(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(current_user: User = Depends(get_current_user)):
    """Issue a fresh token for a still-valid session"""
    return _token_for(current_user)


@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=UserOut)
async def update_me(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update own profile fields (name, department, academic year, student id, phone)"""
    return update_profile(db, current_user, data)


@router.post("/change-password", status_code=204)
async def change_password_endpoint(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    change_password(db, current_user, data.current_password, data.new_password)
