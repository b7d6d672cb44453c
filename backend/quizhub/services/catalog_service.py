from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from quizhub.core.config import settings
from quizhub.core.errors import NotFoundError, PermissionDeniedError
from quizhub.models.exam import Exam
from quizhub.models.question import Question
from quizhub.models.user import User
from quizhub.schemas.exam import ExamCreateRequest, ExamDetailOut, ExamOut, ExamUpdateRequest
from quizhub.schemas.question import (
    QuestionCreateRequest,
    QuestionOption,
    QuestionOut,
    QuestionPublicOut,
    QuestionUpdateRequest,
)

logger = logging.getLogger(__name__)

# Columns that cannot be patched to null
_EXAM_REQUIRED = {"title", "subject", "duration", "total_questions", "total_points", "passing_score", "is_active"}
_QUESTION_REQUIRED = {"question", "type", "options", "points", "exam_id"}


def _require_owner(user: User, owner_id: int, what: str) -> None:
    if int(owner_id) != int(user.id) and not user.is_admin:
        logger.warning("user id=%s denied write on %s owned by user id=%s", user.id, what, owner_id)
        raise PermissionDeniedError(f"Only the owner can modify this {what}")


def _patch(row: Any, changes: Dict[str, Any], required: set) -> None:
    for key, value in changes.items():
        if value is None and key in required:
            continue
        if isinstance(value, str) and key in {"title", "subject", "question"}:
            value = value.strip()
        setattr(row, key, value)


# ----- exams -----

def get_exam(db: Session, exam_id: int) -> Exam:
    exam = db.query(Exam).filter(Exam.id == int(exam_id)).first()
    if not exam:
        raise NotFoundError("Exam not found")
    return exam


def get_exam_questions(db: Session, exam_id: int) -> List[Question]:
    return (
        db.query(Question)
        .filter(Question.exam_id == int(exam_id))
        .order_by(Question.id.asc())
        .all()
    )


def question_counts(db: Session, exam_ids: List[int]) -> Dict[int, int]:
    if not exam_ids:
        return {}
    rows = (
        db.query(Question.exam_id, func.count(Question.id))
        .filter(Question.exam_id.in_([int(x) for x in exam_ids]))
        .group_by(Question.exam_id)
        .all()
    )
    return {int(exam_id): int(cnt or 0) for exam_id, cnt in rows}


def list_exams(db: Session) -> List[Exam]:
    return (
        db.query(Exam)
        .filter(Exam.is_active.is_(True))
        .order_by(Exam.created_at.desc(), Exam.id.desc())
        .all()
    )


def create_exam(db: Session, *, owner: User, payload: ExamCreateRequest) -> Exam:
    exam = Exam(
        title=payload.title.strip(),
        description=payload.description,
        subject=payload.subject.strip(),
        duration=payload.duration,
        total_questions=payload.total_questions,
        total_points=payload.total_points,
        passing_score=payload.passing_score,
        is_active=payload.is_active,
        created_by=int(owner.id),
    )
    db.add(exam)
    db.commit()
    db.refresh(exam)
    logger.info("exam id=%s created by user id=%s", exam.id, owner.id)
    return exam


def update_exam(db: Session, *, user: User, exam_id: int, payload: ExamUpdateRequest) -> Exam:
    exam = get_exam(db, exam_id)
    _require_owner(user, exam.created_by, "exam")
    _patch(exam, payload.model_dump(exclude_unset=True), _EXAM_REQUIRED)
    db.commit()
    db.refresh(exam)
    return exam


def delete_exam(db: Session, *, user: User, exam_id: int) -> int:
    """Delete an exam. Returns the number of questions deleted with it."""
    exam = get_exam(db, exam_id)
    _require_owner(user, exam.created_by, "exam")

    removed_questions = 0
    if settings.EXAM_DELETE_POLICY == "cascade":
        removed_questions = (
            db.query(Question)
            .filter(Question.exam_id == int(exam.id))
            .delete(synchronize_session=False)
        )
    db.delete(exam)
    db.commit()

    logger.info(
        "exam id=%s deleted by user id=%s (policy=%s, questions removed=%s)",
        exam_id,
        user.id,
        settings.EXAM_DELETE_POLICY,
        removed_questions,
    )
    return int(removed_questions or 0)


# ----- questions -----

def get_question(db: Session, question_id: int) -> Question:
    question = db.query(Question).filter(Question.id == int(question_id)).first()
    if not question:
        raise NotFoundError("Question not found")
    return question


def list_questions(db: Session, exam_id: Optional[int] = None) -> List[Question]:
    q = db.query(Question)
    if exam_id is not None:
        q = q.filter(Question.exam_id == int(exam_id))
    return q.order_by(Question.created_at.desc(), Question.id.desc()).all()


def create_question(db: Session, *, owner: User, payload: QuestionCreateRequest) -> Question:
    exam = get_exam(db, payload.exam_id)
    _require_owner(owner, exam.created_by, "exam")

    question = Question(
        question=payload.question.strip(),
        type=payload.type,
        options=[o.model_dump() for o in payload.options],
        correct_answer=payload.correct_answer,
        points=payload.points,
        explanation=payload.explanation,
        exam_id=int(exam.id),
        created_by=int(owner.id),
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    logger.info("question id=%s added to exam id=%s", question.id, exam.id)
    return question


def update_question(db: Session, *, user: User, question_id: int, payload: QuestionUpdateRequest) -> Question:
    question = get_question(db, question_id)
    _require_owner(user, question.created_by, "question")

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("exam_id") is not None and int(changes["exam_id"]) != int(question.exam_id):
        target = get_exam(db, changes["exam_id"])
        _require_owner(user, target.created_by, "exam")
    if changes.get("options") is not None:
        changes["options"] = [QuestionOption(**o).model_dump() for o in changes["options"]]

    _patch(question, changes, _QUESTION_REQUIRED)
    db.commit()
    db.refresh(question)
    return question


def delete_question(db: Session, *, user: User, question_id: int) -> None:
    question = get_question(db, question_id)
    _require_owner(user, question.created_by, "question")
    db.delete(question)
    db.commit()
    logger.info("question id=%s deleted by user id=%s", question_id, user.id)


# ----- output mapping -----

def question_public_out(q: Question) -> QuestionPublicOut:
    return QuestionPublicOut(
        id=int(q.id),
        question=str(q.question),
        type=str(q.type),
        options=[QuestionOption(**o) for o in (q.options or [])],
        points=int(q.points or 0),
        explanation=q.explanation,
    )


def question_out(q: Question) -> QuestionOut:
    base = question_public_out(q).model_dump()
    return QuestionOut(
        **base,
        correct_answer=q.correct_answer,
        exam_id=int(q.exam_id),
        created_by=int(q.created_by),
        created_at=q.created_at,
        updated_at=q.updated_at,
    )


def exam_out(e: Exam, question_count: int = 0) -> ExamOut:
    return ExamOut(
        id=int(e.id),
        title=str(e.title),
        description=e.description,
        subject=str(e.subject),
        duration=int(e.duration or 0),
        total_questions=int(e.total_questions or 0),
        total_points=int(e.total_points or 0),
        passing_score=int(e.passing_score or 0),
        is_active=bool(e.is_active),
        created_by=int(e.created_by),
        question_count=int(question_count or 0),
        created_at=e.created_at,
        updated_at=e.updated_at,
    )


def exam_detail_out(e: Exam, questions: List[Question]) -> ExamDetailOut:
    return ExamDetailOut(
        **exam_out(e, question_count=len(questions)).model_dump(),
        questions=[question_public_out(q) for q in questions],
    )
