from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserSummaryOut(BaseModel):
    id: int
    full_name: str
    username: str


class UserPublicOut(BaseModel):
    """Public profile; never carries the credential hash."""

    id: int
    full_name: str
    username: str
    role: str = "user"
    friends: List[int] = Field(default_factory=list)
    friend_requests_sent: List[int] = Field(default_factory=list)
    friend_requests_received: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class FriendSuggestionOut(UserSummaryOut):
    mutual_count: int = 0


class FriendRequestsOut(BaseModel):
    received: List[UserSummaryOut] = Field(default_factory=list)
    sent: List[UserSummaryOut] = Field(default_factory=list)


class FriendRequestPayload(BaseModel):
    """``{"from": id, "to": id}``; send/cancel act as ``from``, accept acts as ``to``."""

    model_config = ConfigDict(populate_by_name=True)

    from_user_id: int = Field(alias="from")
    to_user_id: int = Field(alias="to")


class RemoveFriendPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")
    friend_id: int = Field(alias="friendId")


class RelationshipRepairOut(BaseModel):
    users_scanned: int = 0
    users_repaired: int = 0
    edges_added: int = 0
    edges_removed: int = 0


class UserStatusPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_active: bool = Field(alias="isActive")
