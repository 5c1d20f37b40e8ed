"""
Draft/Resume State - quiz drafts and reading bookmarks.

Both stores are ephemeral. Nothing here feeds completion or XP, so losing a
row only means the learner starts the section or quiz from the beginning.
"""

import uuid
from datetime import datetime
from typing import Dict, Mapping, Optional, Type, Union

from pydantic import BaseModel
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from secaware.database import atomic
from secaware.kernel.errors import InvalidInput, NotFound
from secaware.kernel.models.base import utcnow
from secaware.kernel.models.curriculum import LearningContent, Question, Section
from secaware.kernel.models.progress import QuizDraft, ReadingPosition
from secaware.logging_config import get_logger

logger = get_logger(__name__)

ResumeRow = Union[QuizDraft, ReadingPosition]


class QuizDraftState(BaseModel):
    """In-progress quiz for one section."""

    section_id: uuid.UUID
    current_question_index: int
    draft_answers: Dict[int, str]
    updated_at: Optional[datetime] = None


class ReadingResume(BaseModel):
    """Where to resume reading a section."""

    section_id: uuid.UUID
    step_index: int
    total_steps: int


def clamp_step(last_step_index: Optional[int], total_steps: int) -> int:
    """Stored step if it is still a valid step, otherwise 0."""
    if last_step_index is None or total_steps <= 0:
        return 0
    if 0 <= last_step_index < total_steps:
        return last_step_index
    return 0


class DraftStore:
    """Upserts and reads QuizDraft / ReadingPosition rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _find(self, model: Type[ResumeRow], user_id: uuid.UUID, section_id: uuid.UUID) -> Optional[ResumeRow]:
        q = select(model).where(model.user_id == user_id, model.section_id == section_id)
        return (await self.session.execute(q)).scalar_one_or_none()

    async def _upsert(self, model: Type[ResumeRow], user_id: uuid.UUID, section_id: uuid.UUID, **values) -> ResumeRow:
        """One row per (user, section); the latest save wins."""
        values["updated_at"] = utcnow()
        async with atomic(self.session):
            row = await self._find(model, user_id, section_id)
            if row is None:
                row = model(user_id=user_id, section_id=section_id, **values)
                try:
                    async with self.session.begin_nested():
                        self.session.add(row)
                    return row
                except IntegrityError:
                    logger.info(
                        "Concurrent resume state insert",
                        extra={"user_id": str(user_id), "section_id": str(section_id), "table": model.__tablename__},
                    )
                    row = await self._find(model, user_id, section_id)
                    if row is None:
                        raise
            for key, value in values.items():
                setattr(row, key, value)
            await self.session.flush()
        return row

    async def _question_count(self, section_id: uuid.UUID) -> int:
        if await self.session.get(Section, section_id) is None:
            raise NotFound(f"Section {section_id} not found")
        q = select(func.count(Question.id)).where(Question.section_id == section_id)
        return (await self.session.execute(q)).scalar() or 0

    async def _step_count(self, section_id: uuid.UUID) -> int:
        if await self.session.get(Section, section_id) is None:
            raise NotFound(f"Section {section_id} not found")
        q = select(func.count(LearningContent.id)).where(LearningContent.section_id == section_id)
        return (await self.session.execute(q)).scalar() or 0

    async def save_quiz_draft(
        self,
        user_id: uuid.UUID,
        section_id: uuid.UUID,
        current_question_index: int,
        draft_answers: Mapping[int, str],
    ) -> QuizDraftState:
        """Store the in-progress quiz. Indices must point at existing questions."""
        total = await self._question_count(section_id)
        if total == 0:
            raise InvalidInput("Section has no quiz")
        if not 0 <= current_question_index < total:
            raise InvalidInput("current_question_index out of range")
        bad = [i for i in draft_answers if not 0 <= int(i) < total]
        if bad:
            raise InvalidInput(f"Draft answer index out of range: {bad[0]}")

        answers = {str(int(k)): v for k, v in draft_answers.items()}
        draft = await self._upsert(
            QuizDraft,
            user_id,
            section_id,
            current_question_index=current_question_index,
            draft_answers=answers,
        )
        return self._draft_state(draft)

    async def get_quiz_draft(self, user_id: uuid.UUID, section_id: uuid.UUID) -> Optional[QuizDraftState]:
        draft = await self._find(QuizDraft, user_id, section_id)
        return self._draft_state(draft) if draft else None

    async def clear_quiz_draft(self, user_id: uuid.UUID, section_id: uuid.UUID) -> None:
        async with atomic(self.session):
            await self.session.execute(
                delete(QuizDraft).where(QuizDraft.user_id == user_id, QuizDraft.section_id == section_id)
            )

    async def save_reading_position(
        self,
        user_id: uuid.UUID,
        section_id: uuid.UUID,
        step_index: int,
    ) -> ReadingResume:
        """Bookmark the step being viewed."""
        if step_index < 0:
            raise InvalidInput("step_index cannot be negative")
        total = await self._step_count(section_id)
        await self._upsert(ReadingPosition, user_id, section_id, last_step_index=step_index)
        return ReadingResume(
            section_id=section_id,
            step_index=clamp_step(step_index, total),
            total_steps=total,
        )

    async def resume_reading(self, user_id: uuid.UUID, section_id: uuid.UUID) -> ReadingResume:
        """Step to resume at; 0 when nothing is stored or the stored step no longer exists."""
        total = await self._step_count(section_id)
        q = select(ReadingPosition.last_step_index).where(
            ReadingPosition.user_id == user_id,
            ReadingPosition.section_id == section_id,
        )
        last = (await self.session.execute(q)).scalar_one_or_none()
        return ReadingResume(section_id=section_id, step_index=clamp_step(last, total), total_steps=total)

    @staticmethod
    def _draft_state(draft: QuizDraft) -> QuizDraftState:
        return QuizDraftState(
            section_id=draft.section_id,
            current_question_index=draft.current_question_index,
            draft_answers={int(k): v for k, v in (draft.draft_answers or {}).items()},
            updated_at=draft.updated_at,
        )
