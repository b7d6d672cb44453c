from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from quizhub.db.base_class import Base


QUESTION_TYPES = ("multiple_choice", "true_false", "short_answer")


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="multiple_choice",
        server_default=text("'multiple_choice'"),
    )
    # [{"text": str, "is_correct": bool}]; display only, grading uses correct_answer
    options: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    correct_answer: Mapped[str | None] = mapped_column(Text, nullable=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default=text("1"))
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)

    # No FK: with EXAM_DELETE_POLICY=keep a question may outlive its exam
    exam_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
