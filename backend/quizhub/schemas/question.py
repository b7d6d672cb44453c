from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


QuestionType = Literal["multiple_choice", "true_false", "short_answer"]


class QuestionOption(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    is_correct: bool = Field(default=False, alias="isCorrect")


class QuestionCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(min_length=1)
    type: QuestionType = "multiple_choice"
    options: List[QuestionOption] = Field(default_factory=list)
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")
    points: int = Field(default=1, ge=0)
    explanation: Optional[str] = None
    exam_id: int = Field(alias="exam")


class QuestionUpdateRequest(BaseModel):
    """Partial patch: only fields present in the body are applied."""

    model_config = ConfigDict(populate_by_name=True)

    question: Optional[str] = Field(default=None, min_length=1)
    type: Optional[QuestionType] = None
    options: Optional[List[QuestionOption]] = None
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")
    points: Optional[int] = Field(default=None, ge=0)
    explanation: Optional[str] = None
    exam_id: Optional[int] = Field(default=None, alias="exam")


class QuestionPublicOut(BaseModel):
    """Question as shown to exam takers (no canonical answer)."""

    id: int
    question: str
    type: str
    options: List[QuestionOption] = Field(default_factory=list)
    points: int
    explanation: Optional[str] = None


class QuestionOut(QuestionPublicOut):
    correct_answer: Optional[str] = None
    exam_id: int
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
