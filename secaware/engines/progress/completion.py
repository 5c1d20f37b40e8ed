"""
Section Completion Resolver.

Completion is never stored. It is recomputed from learning-progress and
question-attempt rows every time, and every caller (module listing,
section listing, statistics) goes through is_section_completed().
"""

import uuid
from dataclasses import dataclass
from typing import Dict, Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from secaware.engines.progress.scoring import percentage, quiz_passed
from secaware.kernel.models.curriculum import LearningContent, Question
from secaware.kernel.models.progress import LearningProgress, QuestionAttempt


@dataclass(frozen=True)
class SectionFacts:
    """Counts a learner's completion of one section is derived from."""

    section_id: uuid.UUID
    learning_total: int = 0
    learning_completed: int = 0
    question_total: int = 0
    questions_correct: int = 0

    @property
    def has_learning_content(self) -> bool:
        return self.learning_total > 0

    @property
    def has_quiz(self) -> bool:
        return self.question_total > 0

    @property
    def completable(self) -> bool:
        """Sections with neither learning content nor questions can never complete."""
        return self.has_learning_content or self.has_quiz

    @property
    def quiz_percentage(self) -> int:
        return percentage(self.questions_correct, self.question_total)


def is_section_completed(facts: SectionFacts, pass_threshold: float) -> bool:
    """
    Learning + quiz: every screen read and quiz passed.
    Learning only: every screen read.
    Quiz only: quiz passed.
    Neither: never completed.
    """
    if facts.has_learning_content:
        if facts.learning_completed < facts.learning_total:
            return False
        return not facts.has_quiz or quiz_passed(
            facts.questions_correct, facts.question_total, pass_threshold
        )
    if facts.has_quiz:
        return quiz_passed(facts.questions_correct, facts.question_total, pass_threshold)
    return False


async def load_section_facts(
    session: AsyncSession,
    user_id: uuid.UUID,
    section_ids: Iterable[uuid.UUID],
) -> Dict[uuid.UUID, SectionFacts]:
    """Fetch counts for many sections with two grouped queries. Read-only."""
    ids = list(section_ids)
    if not ids:
        return {}

    learning_q = (
        select(
            LearningContent.section_id,
            func.count(LearningContent.id).label("total"),
            func.count(LearningProgress.id).label("completed"),
        )
        .outerjoin(
            LearningProgress,
            (LearningProgress.learning_content_id == LearningContent.id)
            & (LearningProgress.user_id == user_id)
            & (LearningProgress.completed.is_(True)),
        )
        .where(LearningContent.section_id.in_(ids))
        .group_by(LearningContent.section_id)
    )
    quiz_q = (
        select(
            Question.section_id,
            func.count(Question.id).label("total"),
            func.count(QuestionAttempt.id).label("correct"),
        )
        .outerjoin(
            QuestionAttempt,
            (QuestionAttempt.question_id == Question.id)
            & (QuestionAttempt.user_id == user_id)
            & (QuestionAttempt.is_correct.is_(True)),
        )
        .where(Question.section_id.in_(ids))
        .group_by(Question.section_id)
    )

    learning = {r.section_id: r for r in (await session.execute(learning_q)).all()}
    quiz = {r.section_id: r for r in (await session.execute(quiz_q)).all()}

    facts: Dict[uuid.UUID, SectionFacts] = {}
    for sid in ids:
        lr = learning.get(sid)
        qr = quiz.get(sid)
        facts[sid] = SectionFacts(
            section_id=sid,
            learning_total=lr.total if lr else 0,
            learning_completed=lr.completed if lr else 0,
            question_total=qr.total if qr else 0,
            questions_correct=qr.correct if qr else 0,
        )
    return facts
