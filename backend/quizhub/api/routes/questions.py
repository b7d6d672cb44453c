from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from quizhub.api.deps import get_db, require_catalog_reader, require_user
from quizhub.models.question import Question
from quizhub.models.user import User
from quizhub.schemas.question import QuestionCreateRequest, QuestionUpdateRequest
from quizhub.services import catalog_service


router = APIRouter(prefix="/questions", tags=["questions"])


def _question_for(reader: Optional[User], q: Question) -> dict:
    # Canonical answers are only shown to the question's owner and admins
    if reader is not None and (int(reader.id) == int(q.created_by) or reader.is_admin):
        return catalog_service.question_out(q).model_dump()
    return catalog_service.question_public_out(q).model_dump()


@router.get("")
def list_questions(
    request: Request,
    exam_id: Optional[int] = Query(default=None, alias="examId"),
    db: Session = Depends(get_db),
    reader: Optional[User] = Depends(require_catalog_reader),
):
    rows = catalog_service.list_questions(db, exam_id=exam_id)
    out = [_question_for(reader, q) for q in rows]
    return {"request_id": request.state.request_id, "success": True, "count": len(out), "data": out, "error": None}


@router.get("/{question_id}")
def get_question(
    request: Request,
    question_id: int,
    db: Session = Depends(get_db),
    reader: Optional[User] = Depends(require_catalog_reader),
):
    q = catalog_service.get_question(db, question_id)
    return {"request_id": request.state.request_id, "success": True, "data": _question_for(reader, q), "error": None}


@router.post("", status_code=201)
def create_question(
    request: Request,
    payload: QuestionCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    q = catalog_service.create_question(db, owner=user, payload=payload)
    out = catalog_service.question_out(q).model_dump()
    return {"request_id": request.state.request_id, "success": True, "data": out, "error": None}


@router.put("/{question_id}")
def update_question(
    request: Request,
    question_id: int,
    payload: QuestionUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    q = catalog_service.update_question(db, user=user, question_id=question_id, payload=payload)
    out = catalog_service.question_out(q).model_dump()
    return {"request_id": request.state.request_id, "success": True, "data": out, "error": None}


@router.delete("/{question_id}")
def delete_question(
    request: Request,
    question_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    catalog_service.delete_question(db, user=user, question_id=question_id)
    return {
        "request_id": request.state.request_id,
        "success": True,
        "data": {"id": question_id},
        "message": "Question deleted successfully",
        "error": None,
    }
