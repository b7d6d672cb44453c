from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from quizhub.core.errors import InvalidExamConfigurationError, NotFoundError
from quizhub.models.exam import Exam
from quizhub.models.question import Question
from quizhub.models.result import Result
from quizhub.models.user import User
from quizhub.schemas.exam import ExamSummaryOut
from quizhub.schemas.result import AnswerRecordOut, ResultOut, SubmitAnswer
from quizhub.schemas.user import UserSummaryOut
from quizhub.services.user_service import user_summary_out

logger = logging.getLogger(__name__)


def round_half_up(numerator: int, denominator: int) -> int:
    # Integers only: 29 / 200 * 100 is 14.4999... as a float, and round() is banker's.
    return (2 * int(numerator) + int(denominator)) // (2 * int(denominator))


def grade_answers(questions: Iterable[Question], answers: Iterable[SubmitAnswer]) -> tuple[List[Dict[str, Any]], int]:
    """Score answers against an exam's questions.

    Answers naming a question outside the exam are skipped. A question is
    correct only on exact string equality with its canonical answer.
    """
    by_id = {int(q.id): q for q in questions}

    processed: List[Dict[str, Any]] = []
    total_score = 0
    for a in answers:
        q = by_id.get(int(a.question_id))
        if q is None:
            continue
        is_correct = q.correct_answer == a.selected_answer
        points = int(q.points or 0) if is_correct else 0
        total_score += points
        processed.append(
            {
                "question_id": int(q.id),
                "selected_answer": a.selected_answer,
                "is_correct": bool(is_correct),
                "points_awarded": points,
            }
        )
    return processed, total_score


def compute_percentage(total_score: int, total_points: int) -> int:
    if not total_points:
        raise InvalidExamConfigurationError()
    return round_half_up(100 * int(total_score), int(total_points))


def submit_result(
    db: Session,
    *,
    user_id: int,
    exam_id: int,
    answers: List[SubmitAnswer],
    time_spent: int,
    started_at: datetime,
) -> Result:
    exam = db.query(Exam).filter(Exam.id == int(exam_id)).first()
    if not exam:
        raise NotFoundError("Exam not found")

    questions: List[Question] = db.query(Question).filter(Question.exam_id == int(exam.id)).all()

    processed, total_score = grade_answers(questions, answers)
    # Raises before anything is written for zero-point exams
    percentage = compute_percentage(total_score, int(exam.total_points or 0))
    is_passed = percentage >= int(exam.passing_score or 0)

    result = Result(
        user_id=int(user_id),
        exam_id=int(exam.id),
        answers=processed,
        total_score=int(total_score),
        max_score=int(exam.total_points),
        percentage=int(percentage),
        is_passed=bool(is_passed),
        time_spent=int(time_spent or 0),
        started_at=started_at,
        completed_at=datetime.now(timezone.utc),
    )
    db.add(result)
    db.commit()
    db.refresh(result)

    logger.info(
        "result id=%s user=%s exam=%s score=%s/%s (%s%%) passed=%s",
        result.id,
        user_id,
        exam.id,
        total_score,
        exam.total_points,
        percentage,
        is_passed,
    )
    return result


def get_result(db: Session, result_id: int) -> Result:
    result = db.query(Result).filter(Result.id == int(result_id)).first()
    if not result:
        raise NotFoundError("Result not found")
    return result


def list_user_results(db: Session, user_id: int) -> List[Result]:
    return (
        db.query(Result)
        .filter(Result.user_id == int(user_id))
        .order_by(Result.created_at.desc(), Result.id.desc())
        .all()
    )


def list_exam_results(db: Session, exam_id: int) -> List[Result]:
    return (
        db.query(Result)
        .filter(Result.exam_id == int(exam_id))
        .order_by(Result.created_at.desc(), Result.id.desc())
        .all()
    )


# ----- output mapping -----

def _exam_summaries(db: Session, exam_ids: Iterable[int], *, with_scoring: bool) -> Dict[int, ExamSummaryOut]:
    ids = sorted({int(x) for x in exam_ids})
    if not ids:
        return {}
    out: Dict[int, ExamSummaryOut] = {}
    for e in db.query(Exam).filter(Exam.id.in_(ids)).all():
        out[int(e.id)] = ExamSummaryOut(
            id=int(e.id),
            title=str(e.title),
            subject=str(e.subject),
            total_points=int(e.total_points) if with_scoring else None,
            passing_score=int(e.passing_score) if with_scoring else None,
        )
    return out


def _user_summaries(db: Session, user_ids: Iterable[int]) -> Dict[int, UserSummaryOut]:
    ids = sorted({int(x) for x in user_ids})
    if not ids:
        return {}
    return {
        int(u.id): user_summary_out(u)
        for u in db.query(User).filter(User.id.in_(ids)).all()
    }


def result_out(
    r: Result,
    *,
    exam: Optional[ExamSummaryOut] = None,
    user: Optional[UserSummaryOut] = None,
) -> ResultOut:
    return ResultOut(
        id=int(r.id),
        user_id=int(r.user_id),
        exam_id=int(r.exam_id),
        answers=[AnswerRecordOut(**a) for a in (r.answers or [])],
        total_score=int(r.total_score),
        max_score=int(r.max_score),
        percentage=int(r.percentage),
        is_passed=bool(r.is_passed),
        time_spent=int(r.time_spent or 0),
        started_at=r.started_at,
        completed_at=r.completed_at,
        created_at=r.created_at,
        exam=exam,
        user=user,
    )


def results_out(
    db: Session,
    rows: List[Result],
    *,
    include_exam: bool = False,
    include_user: bool = False,
    exam_scoring: bool = False,
) -> List[ResultOut]:
    exams = _exam_summaries(db, (r.exam_id for r in rows), with_scoring=exam_scoring) if include_exam else {}
    users = _user_summaries(db, (r.user_id for r in rows)) if include_user else {}
    return [
        result_out(r, exam=exams.get(int(r.exam_id)), user=users.get(int(r.user_id)))
        for r in rows
    ]
