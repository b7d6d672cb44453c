"""Common FastAPI dependencies.

Auth is a bearer JWT (``Authorization: Bearer <token>``) whose ``sub`` is the
user id. Optional variants return None instead of failing so routes can apply
configurable access policies.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from quizhub.core.config import settings
from quizhub.core.errors import AuthError, PermissionDeniedError
from quizhub.core.security import user_id_from_token
from quizhub.db.session import get_db
from quizhub.models.user import User
from quizhub.services import user_service


bearer_scheme = HTTPBearer(auto_error=False)


def _token(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if not credentials or not credentials.credentials:
        return None
    return str(credentials.credentials).strip() or None


def get_current_user_optional(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[User]:
    """Return the token's user, or None when the token is missing or unusable."""
    uid = user_id_from_token(_token(credentials))
    if uid is None:
        return None
    user = user_service.get_user(db, uid)
    if not user or not bool(getattr(user, "is_active", True)):
        return None
    return user


def require_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    return user_service.get_user_by_token(db, _token(credentials))


def require_admin(user: User = Depends(require_user)) -> User:
    if not user.is_admin:
        raise PermissionDeniedError("Admin role required")
    return user


def require_catalog_reader(user: Optional[User] = Depends(get_current_user_optional)) -> Optional[User]:
    """Exam/question reads: token required unless CATALOG_READS_REQUIRE_AUTH is off."""
    if settings.CATALOG_READS_REQUIRE_AUTH and user is None:
        raise AuthError("Not authorized, invalid or missing token")
    return user


def check_relationship_actor(user: Optional[User], acting_user_id: int) -> None:
    """With RELATIONSHIP_ROUTES_REQUIRE_AUTH on, only the acting user (or an admin) may mutate."""
    if not settings.RELATIONSHIP_ROUTES_REQUIRE_AUTH:
        return
    if user is None:
        raise AuthError("Not authorized, invalid or missing token")
    if int(user.id) != int(acting_user_id) and not user.is_admin:
        raise PermissionDeniedError("You can only manage your own friend requests")


__all__ = [
    "get_db",
    "get_current_user_optional",
    "require_user",
    "require_admin",
    "require_catalog_reader",
    "check_relationship_actor",
]
