from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from quizhub.db.base_class import Base


class Exam(Base):
    """An exam owned by its creator.

    Its question set is every Question whose ``exam_id`` points here (order is
    irrelevant); see ``catalog_service.get_exam_questions``.
    """

    __tablename__ = "exams"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    # minutes
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60, server_default=text("60"))
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=100, server_default=text("100"))
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False, default=60, server_default=text("60"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"), index=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
