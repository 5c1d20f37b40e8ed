"""
Kernel Data Models

SQLAlchemy models for learners, curriculum content and progress records.
"""

from secaware.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow
from secaware.kernel.models.user import User
from secaware.kernel.models.curriculum import Module, Section, LearningContent, Question
from secaware.kernel.models.progress import (
    QuestionAttempt,
    LearningProgress,
    QuizDraft,
    ReadingPosition,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    # User
    "User",
    # Curriculum
    "Module",
    "Section",
    "LearningContent",
    "Question",
    # Progress
    "QuestionAttempt",
    "LearningProgress",
    "QuizDraft",
    "ReadingPosition",
]
