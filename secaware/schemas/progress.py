"""
Request bodies for the progress API.

Response bodies are the engine result models (AnswerResult, QuizSubmission, ...).
"""

import uuid
from typing import Dict, Optional

from pydantic import BaseModel, Field


class AnswerSubmitRequest(BaseModel):
    """Single answer: index into the question's options."""

    selected_index: Optional[int] = Field(default=None, ge=0)


class QuizSubmitRequest(BaseModel):
    """Whole quiz: question index -> chosen option text."""

    answers: Dict[int, str] = Field(min_length=1)


class QuizDraftRequest(BaseModel):
    """In-progress quiz state to store for resuming later."""

    current_question_index: int = Field(default=0, ge=0)
    draft_answers: Dict[int, str] = Field(default_factory=dict)


class ReadingPositionRequest(BaseModel):
    """Step currently viewed in a section's learning content."""

    step_index: int = Field(ge=0)


class AvailabilityResponse(BaseModel):
    """Whether the learner may open a section."""

    section_id: uuid.UUID
    available: bool
