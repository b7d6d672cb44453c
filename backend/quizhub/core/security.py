from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from quizhub.core.config import settings


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=int(settings.PASSWORD_BCRYPT_ROUNDS),
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # malformed/unknown hash
        return False


def create_access_token(*, subject: str, expires_minutes: Optional[int] = None, extra: Optional[Dict[str, Any]] = None) -> str:
    minutes = int(expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES or 1440)
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=minutes)

    to_encode: Dict[str, Any] = {
        "sub": str(subject),
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp()),
    }
    if extra:
        to_encode.update(extra)
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def safe_decode_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        return decode_token(token)
    except JWTError:
        return None


def user_id_from_token(token: Optional[str]) -> Optional[int]:
    """Return the ``sub`` claim as an int, or None for missing/invalid/expired tokens."""
    if not token:
        return None
    claims = safe_decode_token(token)
    if not claims:
        return None
    try:
        return int(str(claims.get("sub")))
    except (TypeError, ValueError):
        return None
