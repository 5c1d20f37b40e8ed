"""
Answer Evaluator - correctness and idempotent XP for a single question.

Rules:
- XP is granted only when the answer is correct and no earlier attempt
  already earned it (no prior row, or prior row incorrect with 0 XP).
- A stored attempt is overwritten only by a correct answer. An incorrect
  answer never erases a correct one.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from secaware.config import Settings, get_settings
from secaware.database import atomic
from secaware.engines.progress.ledger import XPLedger
from secaware.engines.progress.scoring import percentage
from secaware.kernel.errors import Conflict, InvalidInput, NotFound
from secaware.kernel.models.base import utcnow
from secaware.kernel.models.curriculum import Question
from secaware.kernel.models.progress import QuestionAttempt
from secaware.logging_config import get_logger

logger = get_logger(__name__)

ALREADY_AWARDED_MESSAGE = "XP already awarded for this question in a previous attempt"


@dataclass(frozen=True)
class AttemptDecision:
    """What to do with a new answer given the stored attempt."""

    write: bool
    award: bool


def decide_attempt(prior: Optional[QuestionAttempt], is_correct: bool) -> AttemptDecision:
    if prior is None:
        return AttemptDecision(write=True, award=is_correct)
    award = is_correct and not prior.is_correct and prior.xp_awarded == 0
    return AttemptDecision(write=is_correct, award=award)


@dataclass
class AttemptOutcome:
    """Result of recording one answer."""

    attempt: QuestionAttempt
    written: bool
    newly_correct: bool

    @property
    def already_awarded(self) -> bool:
        return not self.newly_correct and self.attempt.xp_awarded > 0


class SectionQuestionProgress(BaseModel):
    """Correct answers over questions in a section."""

    total_questions: int
    correct_answers: int
    percentage: int


class AnswerResult(BaseModel):
    """Response for a single submitted answer."""

    question_id: uuid.UUID
    is_correct: bool  # stored, best-known correctness
    answer_correct: bool  # correctness of this submission
    selected_answer: str
    correct_answer: str
    explanation: str
    xp_awarded: int  # awarded by this call
    already_awarded: bool
    message: Optional[str] = None
    total_xp: int
    level: int
    section_progress: SectionQuestionProgress


class QuestionView(BaseModel):
    """Question without its answer."""

    id: uuid.UUID
    section_id: uuid.UUID
    question_text: str
    options: List[str]
    question_type: str


class AnswerEvaluator:
    """Evaluates answers and records attempts under the sticky/idempotent rules."""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.ledger = XPLedger(session, self.settings)

    async def get_question(self, question_id: uuid.UUID) -> Question:
        question = await self.session.get(Question, question_id)
        if question is None:
            raise NotFound(f"Question {question_id} not found")
        return question

    async def _load_attempt(self, user_id: uuid.UUID, question_id: uuid.UUID) -> Optional[QuestionAttempt]:
        q = (
            select(QuestionAttempt)
            .where(
                QuestionAttempt.user_id == user_id,
                QuestionAttempt.question_id == question_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return (await self.session.execute(q)).scalar_one_or_none()

    async def _insert_attempt(self, attempt: QuestionAttempt) -> None:
        """Insert guarded by the (user, question) unique constraint."""
        try:
            async with self.session.begin_nested():
                self.session.add(attempt)
        except IntegrityError as exc:
            raise Conflict("Attempt recorded concurrently") from exc

    async def _claim_xp(self, prior: QuestionAttempt, selected_answer: str) -> None:
        """Flip an unrewarded attempt to correct; only one writer can win."""
        stmt = (
            update(QuestionAttempt)
            .where(QuestionAttempt.id == prior.id, QuestionAttempt.xp_awarded == 0)
            .values(
                is_correct=True,
                selected_answer=selected_answer,
                xp_awarded=self.settings.question_xp,
                answered_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise Conflict("XP for this attempt was claimed concurrently")

    async def record_attempt(
        self,
        user_id: uuid.UUID,
        question: Question,
        selected_answer: str,
        is_correct: bool,
    ) -> AttemptOutcome:
        """
        Apply one answer to the stored attempt for (user, question).

        Does not touch the ledger; callers decide how much XP a newly
        correct answer is worth. Must run inside a transaction.
        """
        prior = await self._load_attempt(user_id, question.id)

        if prior is None:
            attempt = QuestionAttempt(
                user_id=user_id,
                question_id=question.id,
                is_correct=is_correct,
                selected_answer=selected_answer,
                xp_awarded=self.settings.question_xp if is_correct else 0,
                answered_at=utcnow(),
            )
            try:
                await self._insert_attempt(attempt)
            except Conflict:
                logger.info(
                    "Concurrent first attempt detected",
                    extra={"user_id": str(user_id), "question_id": str(question.id)},
                )
                prior = await self._load_attempt(user_id, question.id)
                if prior is None:
                    raise
            else:
                return AttemptOutcome(attempt=attempt, written=True, newly_correct=is_correct)

        decision = decide_attempt(prior, is_correct)
        if not decision.write:
            logger.debug(
                "Answer not stored, keeping previous attempt",
                extra={"user_id": str(user_id), "question_id": str(question.id)},
            )
            return AttemptOutcome(attempt=prior, written=False, newly_correct=False)

        if decision.award:
            try:
                await self._claim_xp(prior, selected_answer)
            except Conflict:
                logger.info(
                    "XP claim lost to concurrent submission",
                    extra={"user_id": str(user_id), "question_id": str(question.id)},
                )
                await self.session.refresh(prior)
                return AttemptOutcome(attempt=prior, written=False, newly_correct=False)
            await self.session.refresh(prior)
            return AttemptOutcome(attempt=prior, written=True, newly_correct=True)

        # Correct again: refresh the answer, keep the earned XP marker
        prior.selected_answer = selected_answer
        prior.answered_at = utcnow()
        await self.session.flush()
        return AttemptOutcome(attempt=prior, written=True, newly_correct=False)

    async def evaluate(
        self,
        user_id: uuid.UUID,
        question_id: uuid.UUID,
        selected_index: Optional[int],
    ) -> AnswerResult:
        """Check an answer, store it and award XP at most once per question."""
        if selected_index is None or selected_index < 0:
            raise InvalidInput("Valid selected_index is required")

        question = await self.get_question(question_id)
        options = list(question.options or [])
        if selected_index >= len(options):
            raise InvalidInput("Invalid selected_index")
        # Unknown learners are rejected before any write
        await self.ledger.get_standing(user_id)

        selected_answer = options[selected_index]
        answer_correct = selected_answer == question.correct_answer

        async with atomic(self.session):
            outcome = await self.record_attempt(user_id, question, selected_answer, answer_correct)
            xp_now = self.settings.question_xp if outcome.newly_correct else 0
            if xp_now:
                await self.ledger.award(user_id, xp_now)

        standing = await self.ledger.get_standing(user_id)
        progress = await self.section_progress(user_id, question.section_id)
        already = outcome.already_awarded
        return AnswerResult(
            question_id=question.id,
            is_correct=outcome.attempt.is_correct,
            answer_correct=answer_correct,
            selected_answer=selected_answer,
            correct_answer=question.correct_answer,
            explanation=question.explanation,
            xp_awarded=xp_now,
            already_awarded=already,
            message=ALREADY_AWARDED_MESSAGE if already else None,
            total_xp=standing.total_xp,
            level=standing.level,
            section_progress=progress,
        )

    async def section_progress(self, user_id: uuid.UUID, section_id: uuid.UUID) -> SectionQuestionProgress:
        """Correct answers over all questions of the section, read fresh."""
        q = (
            select(
                func.count(Question.id).label("total"),
                func.count(QuestionAttempt.id).label("correct"),
            )
            .select_from(Question)
            .outerjoin(
                QuestionAttempt,
                (QuestionAttempt.question_id == Question.id)
                & (QuestionAttempt.user_id == user_id)
                & (QuestionAttempt.is_correct.is_(True)),
            )
            .where(Question.section_id == section_id)
        )
        row = (await self.session.execute(q)).one()
        return SectionQuestionProgress(
            total_questions=row.total,
            correct_answers=row.correct,
            percentage=percentage(row.correct, row.total),
        )

    async def next_unanswered(self, user_id: uuid.UUID, section_id: uuid.UUID) -> QuestionView:
        """First question of the section the learner has not attempted yet."""
        answered = select(QuestionAttempt.question_id).where(QuestionAttempt.user_id == user_id)
        q = (
            select(Question)
            .where(Question.section_id == section_id, Question.id.not_in(answered))
            .order_by(Question.order_index, Question.id)
            .limit(1)
        )
        question = (await self.session.execute(q)).scalar_one_or_none()
        if question is None:
            raise NotFound("No more questions available for this section")
        return QuestionView(
            id=question.id,
            section_id=question.section_id,
            question_text=question.question_text,
            options=list(question.options or []),
            question_type=question.question_type,
        )
