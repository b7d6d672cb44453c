from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from quizhub.schemas.exam import ExamSummaryOut
from quizhub.schemas.user import UserSummaryOut


class SubmitAnswer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: int = Field(alias="questionId")
    selected_answer: str = Field(alias="selectedAnswer")


class ResultSubmitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    exam_id: int = Field(alias="examId")
    answers: List[SubmitAnswer] = Field(default_factory=list)
    # seconds
    time_spent: int = Field(default=0, alias="timeSpent", ge=0)
    started_at: datetime = Field(alias="startedAt")


class AnswerRecordOut(BaseModel):
    question_id: int
    selected_answer: str
    is_correct: bool
    points_awarded: int


class ResultOut(BaseModel):
    id: int
    user_id: int
    exam_id: int
    answers: List[AnswerRecordOut] = Field(default_factory=list)
    total_score: int
    max_score: int
    percentage: int
    is_passed: bool
    time_spent: int
    started_at: datetime
    completed_at: datetime
    created_at: Optional[datetime] = None
    exam: Optional[ExamSummaryOut] = None
    user: Optional[UserSummaryOut] = None
