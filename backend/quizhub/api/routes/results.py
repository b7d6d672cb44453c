from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from quizhub.api.deps import get_db, require_user
from quizhub.models.user import User
from quizhub.schemas.result import ResultSubmitRequest
from quizhub.services import scoring_service


router = APIRouter(prefix="/results", tags=["results"])


@router.post("", status_code=201)
def submit_result(
    request: Request,
    payload: ResultSubmitRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    result = scoring_service.submit_result(
        db,
        user_id=int(user.id),
        exam_id=payload.exam_id,
        answers=payload.answers,
        time_spent=payload.time_spent,
        started_at=payload.started_at,
    )
    out = scoring_service.result_out(result).model_dump()
    return {"request_id": request.state.request_id, "success": True, "data": out, "error": None}


@router.get("/user/history")
def user_history(request: Request, db: Session = Depends(get_db), user: User = Depends(require_user)):
    rows = scoring_service.list_user_results(db, int(user.id))
    out = [r.model_dump() for r in scoring_service.results_out(db, rows, include_exam=True)]
    return {"request_id": request.state.request_id, "success": True, "count": len(out), "data": out, "error": None}


@router.get("/exam/{exam_id}")
def exam_results(
    request: Request,
    exam_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_user),
):
    rows = scoring_service.list_exam_results(db, exam_id)
    out = [r.model_dump() for r in scoring_service.results_out(db, rows, include_user=True)]
    return {"request_id": request.state.request_id, "success": True, "count": len(out), "data": out, "error": None}


@router.get("/{result_id}")
def get_result(
    request: Request,
    result_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_user),
):
    row = scoring_service.get_result(db, result_id)
    out = scoring_service.results_out(db, [row], include_exam=True, include_user=True, exam_scoring=True)[0]
    return {"request_id": request.state.request_id, "success": True, "data": out.model_dump(), "error": None}
