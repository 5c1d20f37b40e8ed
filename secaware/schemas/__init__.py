"""
Pydantic schemas for API request/response validation.
"""

from secaware.schemas.common import ErrorResponse, HealthResponse
from secaware.schemas.progress import (
    AnswerSubmitRequest,
    QuizSubmitRequest,
    QuizDraftRequest,
    ReadingPositionRequest,
    AvailabilityResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "AnswerSubmitRequest",
    "QuizSubmitRequest",
    "QuizDraftRequest",
    "ReadingPositionRequest",
    "AvailabilityResponse",
]
