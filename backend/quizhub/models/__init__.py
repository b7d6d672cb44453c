"""
Models package initialization
Import all models here to ensure they are registered with SQLAlchemy
"""

from quizhub.models.user import User
from quizhub.models.exam import Exam
from quizhub.models.question import Question, QUESTION_TYPES
from quizhub.models.result import Result, ResultImmutableError

__all__ = [
    "User",
    "Exam",
    "Question",
    "QUESTION_TYPES",
    "Result",
    "ResultImmutableError",
]
