from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, event, func
from sqlalchemy.orm import Mapped, mapped_column

from quizhub.db.base_class import Base


class ResultImmutableError(RuntimeError):
    pass


class Result(Base):
    __tablename__ = "results"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    # No FK: results outlive deleted exams
    exam_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)

    # [{"question_id", "selected_answer", "is_correct", "points_awarded"}]
    answers: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    total_score: Mapped[int] = mapped_column(Integer, nullable=False)
    max_score: Mapped[int] = mapped_column(Integer, nullable=False)
    percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    is_passed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    # seconds
    time_spent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)


@event.listens_for(Result, "before_update")
def _reject_result_update(_mapper, _connection, target: Result) -> None:
    raise ResultImmutableError(f"Result {target.id} is immutable")
