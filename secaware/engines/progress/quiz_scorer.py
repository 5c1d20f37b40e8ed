"""
Quiz Scorer - whole-quiz submission for a section.

Each answer goes through the same sticky/idempotent rules as a single
answer. The learner's XP for the submission is scaled by the answers that
are newly correct in it, plus a one-time bonus for a fully new perfect run.
"""

import uuid
from typing import List, Mapping, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from secaware.config import Settings, get_settings
from secaware.database import atomic
from secaware.engines.progress.answer_evaluator import AnswerEvaluator
from secaware.engines.progress.completion import is_section_completed, load_section_facts
from secaware.engines.progress.drafts import DraftStore
from secaware.engines.progress.ledger import XPLedger
from secaware.engines.progress.scoring import percentage, quiz_passed, quiz_submission_xp
from secaware.kernel.errors import InvalidInput, NotFound
from secaware.kernel.models.curriculum import Question, Section
from secaware.logging_config import get_logger

logger = get_logger(__name__)


class QuizScore(BaseModel):
    """Stored quiz standing of a learner in a section."""

    section_id: uuid.UUID
    total_questions: int
    correct_answers: int
    score_percentage: int
    passed: bool
    threshold: float


class QuizAnswerOutcome(BaseModel):
    """Per-question result within a submission."""

    question_index: int
    question_id: uuid.UUID
    selected_answer: str
    answer_correct: bool
    is_correct: bool
    newly_correct: bool
    correct_answer: str
    explanation: str


class QuizSubmission(BaseModel):
    """Result of submitting a section quiz."""

    section_id: uuid.UUID
    total_questions: int
    answered_questions: int
    correct_this_submission: int
    new_correct_answers: int
    all_correct_answers: int
    score_percentage: int
    passed: bool
    perfect_bonus_awarded: bool
    xp_earned: int
    new_total_xp: int
    new_level: int
    section_completed: bool
    results: List[QuizAnswerOutcome]
    message: str


class QuizScorer:
    """Scores and records quiz submissions."""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.evaluator = AnswerEvaluator(session, self.settings)
        self.ledger = XPLedger(session, self.settings)
        self.drafts = DraftStore(session)

    async def section_questions(self, section_id: uuid.UUID) -> List[Question]:
        """Questions in the order a quiz presents them."""
        if await self.session.get(Section, section_id) is None:
            raise NotFound(f"Section {section_id} not found")
        q = (
            select(Question)
            .where(Question.section_id == section_id)
            .order_by(Question.order_index, Question.id)
        )
        return list((await self.session.execute(q)).scalars().all())

    async def score_section(
        self,
        user_id: uuid.UUID,
        section_id: uuid.UUID,
        threshold: Optional[float] = None,
    ) -> QuizScore:
        """Score from stored attempts. Defaults to the unlock threshold."""
        if await self.session.get(Section, section_id) is None:
            raise NotFound(f"Section {section_id} not found")
        if threshold is None:
            threshold = self.settings.unlock_pass_threshold
        facts = (await load_section_facts(self.session, user_id, [section_id]))[section_id]
        return QuizScore(
            section_id=section_id,
            total_questions=facts.question_total,
            correct_answers=facts.questions_correct,
            score_percentage=facts.quiz_percentage,
            passed=quiz_passed(facts.questions_correct, facts.question_total, threshold),
            threshold=threshold,
        )

    @staticmethod
    def _validate_answers(questions: List[Question], answers: Mapping[int, str]) -> None:
        if not questions:
            raise InvalidInput("Section has no quiz")
        if not answers:
            raise InvalidInput("answers must not be empty")
        for index, answer in answers.items():
            if not 0 <= index < len(questions):
                raise InvalidInput(f"Question index out of range: {index}")
            if answer not in (questions[index].options or []):
                raise InvalidInput(f"Answer for question {index} is not one of its options")

    async def submit_quiz(
        self,
        user_id: uuid.UUID,
        section_id: uuid.UUID,
        answers: Mapping[int, str],
    ) -> QuizSubmission:
        """
        Record every answer, award submission XP once and clear the draft.

        The attempt writes, the XP award and the draft deletion commit
        together or not at all.
        """
        questions = await self.section_questions(section_id)
        self._validate_answers(questions, answers)
        await self.ledger.get_standing(user_id)

        total = len(questions)
        results: List[QuizAnswerOutcome] = []
        async with atomic(self.session):
            for index in sorted(answers):
                question = questions[index]
                selected = answers[index]
                answer_correct = selected == question.correct_answer
                outcome = await self.evaluator.record_attempt(user_id, question, selected, answer_correct)
                results.append(
                    QuizAnswerOutcome(
                        question_index=index,
                        question_id=question.id,
                        selected_answer=selected,
                        answer_correct=answer_correct,
                        is_correct=outcome.attempt.is_correct,
                        newly_correct=outcome.newly_correct,
                        correct_answer=question.correct_answer,
                        explanation=question.explanation,
                    )
                )

            correct_now = sum(1 for r in results if r.answer_correct)
            new_correct = sum(1 for r in results if r.newly_correct)
            all_correct_now = len(results) == total and correct_now == total
            xp = quiz_submission_xp(
                new_correct,
                total,
                max_xp=self.settings.quiz_max_xp,
                perfect_bonus=self.settings.perfect_quiz_bonus_xp,
                all_correct_now=all_correct_now,
            )
            if xp:
                await self.ledger.award(user_id, xp)
            await self.drafts.clear_quiz_draft(user_id, section_id)

        perfect_bonus = all_correct_now and new_correct == total
        standing = await self.ledger.get_standing(user_id)
        facts = (await load_section_facts(self.session, user_id, [section_id]))[section_id]
        threshold = self.settings.unlock_pass_threshold

        logger.info(
            "Quiz submitted",
            extra={
                "user_id": str(user_id),
                "section_id": str(section_id),
                "new_correct": new_correct,
                "xp": xp,
            },
        )
        return QuizSubmission(
            section_id=section_id,
            total_questions=total,
            answered_questions=len(results),
            correct_this_submission=correct_now,
            new_correct_answers=new_correct,
            all_correct_answers=facts.questions_correct,
            score_percentage=percentage(facts.questions_correct, total),
            passed=quiz_passed(facts.questions_correct, total, threshold),
            perfect_bonus_awarded=perfect_bonus,
            xp_earned=xp,
            new_total_xp=standing.total_xp,
            new_level=standing.level,
            section_completed=is_section_completed(facts, threshold),
            results=results,
            message=f"Quiz completed! You earned {xp} XP.",
        )
