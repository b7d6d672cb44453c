from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from quizhub.api.deps import get_db, require_user
from quizhub.core.security import create_access_token
from quizhub.models.user import User
from quizhub.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, TokenResponse
from quizhub.services import user_service


router = APIRouter(tags=["auth"])


def _auth_payload(u: User) -> dict:
    token = TokenResponse(access_token=create_access_token(subject=str(u.id)))
    return AuthResponse(token=token, user=user_service.user_out(u)).model_dump()


@router.post("/auth/register", status_code=201)
def register(request: Request, payload: RegisterRequest, db: Session = Depends(get_db)):
    u = user_service.register(
        db,
        full_name=payload.full_name,
        username=payload.username,
        password=payload.password,
    )
    return {"request_id": request.state.request_id, "success": True, "data": _auth_payload(u), "error": None}


@router.post("/auth/login")
def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    u = user_service.authenticate(db, username=payload.username, password=payload.password)
    return {"request_id": request.state.request_id, "success": True, "data": _auth_payload(u), "error": None}


@router.get("/auth/logout")
def logout(request: Request):
    # Tokens are stateless; the client drops its copy.
    return {
        "request_id": request.state.request_id,
        "success": True,
        "data": None,
        "message": "Logged out successfully",
        "error": None,
    }


@router.get("/auth/me")
def me(request: Request, user: User = Depends(require_user)):
    out = user_service.user_out(user).model_dump()
    return {"request_id": request.state.request_id, "success": True, "data": out, "error": None}
