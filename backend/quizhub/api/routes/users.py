from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from quizhub.api.deps import check_relationship_actor, get_current_user_optional, get_db, require_admin
from quizhub.core.config import settings
from quizhub.models.user import User
from quizhub.schemas.user import FriendRequestPayload, RemoveFriendPayload, UserStatusPayload
from quizhub.services import relationship_service, user_service


router = APIRouter(prefix="/users", tags=["users"])


def _ok(request: Request, message: str, data: Optional[dict] = None) -> dict:
    return {"request_id": request.state.request_id, "success": True, "data": data, "message": message, "error": None}


@router.post("/friend-request/send")
def send_friend_request(
    request: Request,
    payload: FriendRequestPayload,
    db: Session = Depends(get_db),
    actor: Optional[User] = Depends(get_current_user_optional),
):
    check_relationship_actor(actor, payload.from_user_id)
    relationship_service.send_request(db, payload.from_user_id, payload.to_user_id)
    return _ok(request, "Friend request sent")


@router.post("/friend-request/accept")
def accept_friend_request(
    request: Request,
    payload: FriendRequestPayload,
    db: Session = Depends(get_db),
    actor: Optional[User] = Depends(get_current_user_optional),
):
    # `to` accepts the request that `from` sent
    check_relationship_actor(actor, payload.to_user_id)
    relationship_service.accept_request(db, payload.to_user_id, payload.from_user_id)
    return _ok(request, "Friend request accepted")


@router.post("/friend-request/cancel")
def cancel_friend_request(
    request: Request,
    payload: FriendRequestPayload,
    db: Session = Depends(get_db),
    actor: Optional[User] = Depends(get_current_user_optional),
):
    check_relationship_actor(actor, payload.from_user_id)
    relationship_service.cancel_request(db, payload.from_user_id, payload.to_user_id)
    return _ok(request, "Friend request canceled")


@router.post("/friend/remove")
def remove_friend(
    request: Request,
    payload: RemoveFriendPayload,
    db: Session = Depends(get_db),
    actor: Optional[User] = Depends(get_current_user_optional),
):
    check_relationship_actor(actor, payload.user_id)
    removed = relationship_service.remove_friend(db, payload.user_id, payload.friend_id)
    return _ok(request, "Friend removed", {"removed": removed})


@router.post("/maintenance/repair-relationships")
def repair_relationships(request: Request, db: Session = Depends(get_db), _admin: User = Depends(require_admin)):
    report = relationship_service.repair_relationship_edges(db)
    return _ok(request, "Relationship edges reconciled", report.model_dump())


@router.put("/{user_id}/status")
def set_user_status(
    request: Request,
    user_id: int,
    payload: UserStatusPayload,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    u = user_service.set_user_active(db, admin=admin, user_id=user_id, is_active=payload.is_active)
    message = "User activated" if u.is_active else "User deactivated"
    return _ok(request, message, user_service.user_out(u).model_dump())


@router.get("/{user_id}")
def get_user(request: Request, user_id: int, db: Session = Depends(get_db)):
    u = user_service.get_public_user(db, user_id)
    out = user_service.user_public_out(u).model_dump()
    return {"request_id": request.state.request_id, "success": True, "data": out, "error": None}


@router.get("/{user_id}/suggestions")
def friend_suggestions(
    request: Request,
    user_id: int,
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    n = min(int(limit or settings.SUGGESTIONS_DEFAULT_LIMIT), int(settings.SUGGESTIONS_MAX_LIMIT))
    rows = relationship_service.suggest_friends(db, user_id, limit=n)
    out = [r.model_dump() for r in rows]
    return {"request_id": request.state.request_id, "success": True, "count": len(out), "data": out, "error": None}


@router.get("/{user_id}/friends")
def list_friends(request: Request, user_id: int, db: Session = Depends(get_db)):
    out = [r.model_dump() for r in relationship_service.list_friends(db, user_id)]
    return {"request_id": request.state.request_id, "success": True, "count": len(out), "data": out, "error": None}


@router.get("/{user_id}/requests")
def list_requests(request: Request, user_id: int, db: Session = Depends(get_db)):
    out = relationship_service.list_requests(db, user_id).model_dump()
    return {"request_id": request.state.request_id, "success": True, "data": out, "error": None}
