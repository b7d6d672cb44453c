from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from quizhub.db.base_class import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Stored lower-cased/trimmed (see user_service.normalize_username)
    username: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="user", server_default="user")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))

    # Friend graph projections: sorted, de-duplicated lists of user ids.
    # Only relationship_service writes these; sent/received are mirrored across both endpoints.
    friends: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    friend_requests_sent: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    friend_requests_received: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return (self.role or "") == "admin"
