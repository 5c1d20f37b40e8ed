"""
Section endpoints - quiz submission, drafts, reading position, availability.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, status

from secaware.api.deps import CurrentUser, DbSession
from secaware.engines.progress.answer_evaluator import AnswerEvaluator, QuestionView, SectionQuestionProgress
from secaware.engines.progress.content_tracker import LearningContentTracker, SectionLearningProgress
from secaware.engines.progress.curriculum_progress import CurriculumProgress
from secaware.engines.progress.drafts import DraftStore, QuizDraftState, ReadingResume
from secaware.engines.progress.quiz_scorer import QuizScore, QuizScorer, QuizSubmission
from secaware.schemas.progress import (
    AvailabilityResponse,
    QuizDraftRequest,
    QuizSubmitRequest,
    ReadingPositionRequest,
)

router = APIRouter()


@router.get("/{section_id}/availability", response_model=AvailabilityResponse)
async def get_availability(section_id: uuid.UUID, user: CurrentUser, db: DbSession):
    available = await CurriculumProgress(db).is_section_available(user.id, section_id)
    return AvailabilityResponse(section_id=section_id, available=available)


@router.post("/{section_id}/quiz", response_model=QuizSubmission)
async def submit_quiz(section_id: uuid.UUID, body: QuizSubmitRequest, user: CurrentUser, db: DbSession):
    """Submit all quiz answers for a section."""
    return await QuizScorer(db).submit_quiz(user.id, section_id, body.answers)


@router.get("/{section_id}/quiz-score", response_model=QuizScore)
async def get_quiz_score(section_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Stored quiz score and pass state at the unlock threshold."""
    return await QuizScorer(db).score_section(user.id, section_id)


@router.get("/{section_id}/question-progress", response_model=SectionQuestionProgress)
async def get_question_progress(section_id: uuid.UUID, user: CurrentUser, db: DbSession):
    return await AnswerEvaluator(db).section_progress(user.id, section_id)


@router.get("/{section_id}/next-question", response_model=QuestionView)
async def get_next_question(section_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """First question of the section not yet attempted."""
    return await AnswerEvaluator(db).next_unanswered(user.id, section_id)


@router.post("/{section_id}/learn", response_model=SectionLearningProgress)
async def complete_section_learning(section_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Mark every learning screen in the section complete."""
    return await LearningContentTracker(db).mark_section_complete(user.id, section_id)


@router.get("/{section_id}/quiz-draft", response_model=Optional[QuizDraftState])
async def get_quiz_draft(section_id: uuid.UUID, user: CurrentUser, db: DbSession):
    return await DraftStore(db).get_quiz_draft(user.id, section_id)


@router.put("/{section_id}/quiz-draft", response_model=QuizDraftState)
async def save_quiz_draft(section_id: uuid.UUID, body: QuizDraftRequest, user: CurrentUser, db: DbSession):
    return await DraftStore(db).save_quiz_draft(
        user.id, section_id, body.current_question_index, body.draft_answers
    )


@router.delete("/{section_id}/quiz-draft", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quiz_draft(section_id: uuid.UUID, user: CurrentUser, db: DbSession):
    await DraftStore(db).clear_quiz_draft(user.id, section_id)


@router.get("/{section_id}/reading-position", response_model=ReadingResume)
async def get_reading_position(section_id: uuid.UUID, user: CurrentUser, db: DbSession):
    return await DraftStore(db).resume_reading(user.id, section_id)


@router.put("/{section_id}/reading-position", response_model=ReadingResume)
async def save_reading_position(
    section_id: uuid.UUID,
    body: ReadingPositionRequest,
    user: CurrentUser,
    db: DbSession,
):
    return await DraftStore(db).save_reading_position(user.id, section_id, body.step_index)
