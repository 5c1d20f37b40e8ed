"""
Question endpoints - single answer submission.
"""

import uuid

from fastapi import APIRouter

from secaware.api.deps import CurrentUser, DbSession
from secaware.engines.progress.answer_evaluator import AnswerEvaluator, AnswerResult, QuestionView
from secaware.schemas.progress import AnswerSubmitRequest

router = APIRouter()


@router.get("/{question_id}", response_model=QuestionView)
async def get_question(question_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Question without its correct answer."""
    question = await AnswerEvaluator(db).get_question(question_id)
    return QuestionView(
        id=question.id,
        section_id=question.section_id,
        question_text=question.question_text,
        options=list(question.options or []),
        question_type=question.question_type,
    )


@router.post("/{question_id}/answer", response_model=AnswerResult)
async def submit_answer(question_id: uuid.UUID, body: AnswerSubmitRequest, user: CurrentUser, db: DbSession):
    """Check an answer; XP is awarded at most once per question."""
    return await AnswerEvaluator(db).evaluate(user.id, question_id, body.selected_index)
