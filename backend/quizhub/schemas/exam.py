from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from quizhub.schemas.question import QuestionPublicOut


class ExamCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    subject: str = Field(min_length=1, max_length=255)
    duration: int = Field(default=60, ge=0)
    total_questions: int = Field(alias="totalQuestions", ge=0)
    total_points: int = Field(default=100, alias="totalPoints", ge=0)
    passing_score: int = Field(default=60, alias="passingScore", ge=0)
    is_active: bool = Field(default=True, alias="isActive")


class ExamUpdateRequest(BaseModel):
    """Partial patch: only fields present in the body are applied."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    subject: Optional[str] = Field(default=None, min_length=1, max_length=255)
    duration: Optional[int] = Field(default=None, ge=0)
    total_questions: Optional[int] = Field(default=None, alias="totalQuestions", ge=0)
    total_points: Optional[int] = Field(default=None, alias="totalPoints", ge=0)
    passing_score: Optional[int] = Field(default=None, alias="passingScore", ge=0)
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class ExamOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    subject: str
    duration: int
    total_questions: int
    total_points: int
    passing_score: int
    is_active: bool
    created_by: int
    question_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ExamDetailOut(ExamOut):
    questions: List[QuestionPublicOut] = Field(default_factory=list)


class ExamSummaryOut(BaseModel):
    id: int
    title: str
    subject: str
    total_points: Optional[int] = None
    passing_score: Optional[int] = None
