from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizhub.core.config import settings
from quizhub.core.errors import (
    AuthError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from quizhub.core.security import get_password_hash, user_id_from_token, verify_password
from quizhub.models.user import User
from quizhub.schemas.auth import UserOut
from quizhub.schemas.user import UserPublicOut, UserSummaryOut

logger = logging.getLogger(__name__)

# One message for every login failure so usernames cannot be probed.
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def normalize_username(username: Optional[str]) -> str:
    return (username or "").strip().lower()


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == int(user_id)).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == normalize_username(username)).first()


def register(db: Session, *, full_name: Optional[str], username: Optional[str], password: Optional[str]) -> User:
    name = (full_name or "").strip()
    uname = normalize_username(username)
    if not name or not uname or not password:
        raise ValidationError("Please provide all required fields")
    if len(password) < int(settings.PASSWORD_MIN_LENGTH):
        raise ValidationError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")

    if get_user_by_username(db, uname):
        raise DuplicateUsernameError()

    user = User(
        full_name=name,
        username=uname,
        password_hash=get_password_hash(password),
        role="user",
        is_active=True,
        friends=[],
        friend_requests_sent=[],
        friend_requests_received=[],
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same username
        db.rollback()
        raise DuplicateUsernameError()
    db.refresh(user)

    logger.info("registered user id=%s username=%s", user.id, user.username)
    return user


def authenticate(db: Session, *, username: Optional[str], password: Optional[str]) -> User:
    if not username or not password:
        raise ValidationError("Please provide username and password")

    user = get_user_by_username(db, username)
    if not user or not verify_password(password, str(user.password_hash or "")):
        logger.warning("failed login for username=%s", normalize_username(username))
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)
    if not bool(getattr(user, "is_active", True)):
        logger.warning("login for inactive user id=%s", user.id)
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)
    return user


def get_user_by_token(db: Session, token: Optional[str]) -> User:
    """Resolve a bearer token to its user (401 for anything unusable)."""
    uid = user_id_from_token(token)
    if uid is None:
        raise AuthError("Not authorized, invalid or missing token")
    user = get_user(db, uid)
    if not user or not bool(getattr(user, "is_active", True)):
        raise AuthError("Not authorized, user not found")
    return user


def get_public_user(db: Session, user_id: int) -> User:
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def set_user_active(db: Session, *, admin: User, user_id: int, is_active: bool) -> User:
    """Activate or deactivate an account. Inactive users cannot log in and their tokens stop working."""
    user = get_public_user(db, user_id)
    if int(user.id) == int(admin.id) and not is_active:
        raise ValidationError("Admins cannot deactivate their own account")

    user.is_active = bool(is_active)
    db.commit()
    db.refresh(user)
    logger.info("user id=%s is_active=%s set by admin id=%s", user.id, user.is_active, admin.id)
    return user


def ensure_admin(db: Session, *, username: str, password: str, full_name: str = "Administrator") -> User:
    """Create (or promote) the configured admin account. Safe to run repeatedly."""
    user = get_user_by_username(db, username)
    if user:
        if user.role != "admin":
            user.role = "admin"
            db.commit()
            logger.info("promoted user id=%s to admin", user.id)
        return user

    user = User(
        full_name=full_name,
        username=normalize_username(username),
        password_hash=get_password_hash(password),
        role="admin",
        is_active=True,
        friends=[],
        friend_requests_sent=[],
        friend_requests_received=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("bootstrapped admin id=%s username=%s", user.id, user.username)
    return user


def user_out(u: User) -> UserOut:
    return UserOut(
        id=int(u.id),
        full_name=str(u.full_name),
        username=str(u.username),
        role=getattr(u, "role", "user") or "user",
        is_active=bool(getattr(u, "is_active", True)),
        created_at=getattr(u, "created_at", None),
    )


def user_public_out(u: User) -> UserPublicOut:
    return UserPublicOut(
        id=int(u.id),
        full_name=str(u.full_name),
        username=str(u.username),
        role=getattr(u, "role", "user") or "user",
        friends=list(u.friends or []),
        friend_requests_sent=list(u.friend_requests_sent or []),
        friend_requests_received=list(u.friend_requests_received or []),
        created_at=getattr(u, "created_at", None),
    )


def user_summary_out(u: User) -> UserSummaryOut:
    return UserSummaryOut(id=int(u.id), full_name=str(u.full_name), username=str(u.username))
