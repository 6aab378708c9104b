"""
User service - sign-up, sign-in, profiles and admin user management
"""
import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.core.security import hash_password, verify_password
from portal.models.user import User, Role
from portal.schemas.auth import RegisterRequest
from portal.schemas.user import AdminUserCreate, AdminUserUpdate, ProfileUpdate
from portal.services.audit_service import log_audit

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def _ensure_email_free(db: Session, email: str) -> None:
    if get_user_by_email(db, email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An account with this email already exists"
        )


def _new_user(data, role: Role) -> User:
    return User(
        email=data.email.lower(),
        password_hash=hash_password(data.password),
        role=role.value,
        full_name=data.full_name,
        department=data.department,
        academic_year=data.academic_year,
        student_id=data.student_id,
        phone=data.phone,
        active=True,
    )


def register_user(db: Session, data: RegisterRequest) -> User:
    """Self-service sign-up for students and faculty"""
    _ensure_email_free(db, data.email)
    user = _new_user(data, data.role)
    db.add(user)
    db.commit()
    db.refresh(user)

    log_audit(
        db=db,
        actor_id=user.id,
        action="USER_REGISTER",
        entity_type="users",
        entity_id=user.id,
        meta={"email": user.email, "role": user.role}
    )
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Validate credentials

    Raises:
        HTTPException: 401 on unknown email or wrong password, 403 when inactive
    """
    user = get_user_by_email(db, email)
    if not user or user.password_hash is None or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )
    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )
    return user


def update_profile(db: Session, user: User, data: ProfileUpdate) -> User:
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if user.password_hash is None or not verify_password(current_password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )
    user.password_hash = hash_password(new_password)
    db.commit()

    log_audit(
        db=db,
        actor_id=user.id,
        action="USER_PASSWORD_CHANGE",
        entity_type="users",
        entity_id=user.id,
    )


def list_users(
    db: Session,
    role: Optional[Role] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[User], int]:
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == role.value)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(
            func.lower(User.email).like(pattern) | func.lower(User.full_name).like(pattern)
        )
    total = query.count()
    return query.order_by(User.id).offset(skip).limit(limit).all(), total


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def admin_create_user(db: Session, data: AdminUserCreate, actor: User) -> User:
    _ensure_email_free(db, data.email)
    user = _new_user(data, data.role)
    db.add(user)
    db.commit()
    db.refresh(user)

    log_audit(
        db=db,
        actor_id=actor.id,
        action="USER_CREATE",
        entity_type="users",
        entity_id=user.id,
        meta={"email": user.email, "role": user.role}
    )
    return user


def admin_update_user(db: Session, user_id: int, data: AdminUserUpdate, actor: User) -> User:
    user = get_user(db, user_id)
    changes = data.model_dump(exclude_unset=True)
    if user.id == actor.id and (changes.get("active") is False or changes.get("role") not in (None, Role.ADMIN)):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admins cannot deactivate or demote themselves"
        )
    for field, value in changes.items():
        if field == "role" and value is not None:
            value = value.value
        if value is not None or field in ("department", "academic_year", "student_id", "phone"):
            setattr(user, field, value)
    db.commit()
    db.refresh(user)

    log_audit(
        db=db,
        actor_id=actor.id,
        action="USER_UPDATE",
        entity_type="users",
        entity_id=user.id,
        meta=changes
    )
    return user


def bootstrap_initial_admin(db: Session) -> Optional[User]:
    """
    Create the initial admin from INITIAL_ADMIN_EMAIL / INITIAL_ADMIN_PASSWORD
    when no admin exists. Returns the new user, or None when one already exists.
    """
    if db.query(User).filter(User.role == Role.ADMIN.value).first():
        logger.info("Admin user already exists, skipping initial bootstrap")
        return None
    if get_user_by_email(db, settings.INITIAL_ADMIN_EMAIL):
        logger.warning("INITIAL_ADMIN_EMAIL belongs to a non-admin account, skipping initial bootstrap")
        return None

    admin = User(
        email=settings.INITIAL_ADMIN_EMAIL.lower(),
        password_hash=hash_password(settings.INITIAL_ADMIN_PASSWORD),
        role=Role.ADMIN.value,
        full_name="System Administrator",
        active=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)

    logger.info("Initial admin user created: %s", admin.email)
    logger.info("Password: [set via INITIAL_ADMIN_PASSWORD environment variable]")
    return admin
