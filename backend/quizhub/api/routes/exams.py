from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from quizhub.api.deps import get_db, require_catalog_reader, require_user
from quizhub.models.user import User
from quizhub.schemas.exam import ExamCreateRequest, ExamUpdateRequest
from quizhub.services import catalog_service


router = APIRouter(prefix="/exams", tags=["exams"])


@router.get("")
def list_exams(
    request: Request,
    db: Session = Depends(get_db),
    _reader: Optional[User] = Depends(require_catalog_reader),
):
    rows = catalog_service.list_exams(db)
    counts = catalog_service.question_counts(db, [int(e.id) for e in rows])
    out = [catalog_service.exam_out(e, question_count=counts.get(int(e.id), 0)).model_dump() for e in rows]
    return {"request_id": request.state.request_id, "success": True, "count": len(out), "data": out, "error": None}


@router.get("/{exam_id}")
def get_exam(
    request: Request,
    exam_id: int,
    db: Session = Depends(get_db),
    _reader: Optional[User] = Depends(require_catalog_reader),
):
    exam = catalog_service.get_exam(db, exam_id)
    questions = catalog_service.get_exam_questions(db, exam.id)
    out = catalog_service.exam_detail_out(exam, questions).model_dump()
    return {"request_id": request.state.request_id, "success": True, "data": out, "error": None}


@router.post("", status_code=201)
def create_exam(
    request: Request,
    payload: ExamCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    exam = catalog_service.create_exam(db, owner=user, payload=payload)
    out = catalog_service.exam_out(exam).model_dump()
    return {"request_id": request.state.request_id, "success": True, "data": out, "error": None}


@router.put("/{exam_id}")
def update_exam(
    request: Request,
    exam_id: int,
    payload: ExamUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    exam = catalog_service.update_exam(db, user=user, exam_id=exam_id, payload=payload)
    count = catalog_service.question_counts(db, [int(exam.id)]).get(int(exam.id), 0)
    out = catalog_service.exam_out(exam, question_count=count).model_dump()
    return {"request_id": request.state.request_id, "success": True, "data": out, "error": None}


@router.delete("/{exam_id}")
def delete_exam(
    request: Request,
    exam_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    removed = catalog_service.delete_exam(db, user=user, exam_id=exam_id)
    return {
        "request_id": request.state.request_id,
        "success": True,
        "data": {"id": exam_id, "questions_deleted": removed},
        "message": "Exam deleted successfully",
        "error": None,
    }
