"""
Learning-Content Tracker - per-screen completion records.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from secaware.database import atomic
from secaware.engines.progress.ledger import XPLedger
from secaware.engines.progress.scoring import percentage
from secaware.kernel.errors import NotFound
from secaware.kernel.models.base import utcnow
from secaware.kernel.models.curriculum import LearningContent, Section
from secaware.kernel.models.progress import LearningProgress
from secaware.logging_config import get_logger

logger = get_logger(__name__)


class LearningItemProgress(BaseModel):
    """One learning screen and whether the learner finished it."""

    id: uuid.UUID
    screen_title: str
    order_index: int
    completed: bool = False
    completed_at: Optional[datetime] = None


class SectionLearningProgress(BaseModel):
    """Learning screens of a section with completion summary."""

    section_id: uuid.UUID
    progress: List[LearningItemProgress]
    completed_count: int
    total_count: int
    completion_percentage: int


class LearningContentTracker:
    """Marks learning screens complete and reports per-section progress."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.ledger = XPLedger(session)

    async def _find_progress(self, user_id: uuid.UUID, content_id: uuid.UUID) -> Optional[LearningProgress]:
        q = select(LearningProgress).where(
            LearningProgress.user_id == user_id,
            LearningProgress.learning_content_id == content_id,
        )
        return (await self.session.execute(q)).scalar_one_or_none()

    async def _upsert_completed(self, user_id: uuid.UUID, content_id: uuid.UUID) -> LearningProgress:
        """Set completed=True, completed_at=now for (user, content); latest write wins."""
        now = utcnow()
        row = await self._find_progress(user_id, content_id)
        if row is None:
            row = LearningProgress(
                user_id=user_id,
                learning_content_id=content_id,
                completed=True,
                completed_at=now,
            )
            try:
                async with self.session.begin_nested():
                    self.session.add(row)
                return row
            except IntegrityError:
                logger.info(
                    "Concurrent learning progress insert",
                    extra={"user_id": str(user_id), "content_id": str(content_id)},
                )
                row = await self._find_progress(user_id, content_id)
                if row is None:
                    raise
        row.completed = True
        row.completed_at = now
        await self.session.flush()
        return row

    async def mark_complete(self, user_id: uuid.UUID, content_id: uuid.UUID) -> LearningItemProgress:
        """Mark one learning screen complete."""
        content = await self.session.get(LearningContent, content_id)
        if content is None:
            raise NotFound(f"Learning content {content_id} not found")
        await self.ledger.get_standing(user_id)

        async with atomic(self.session):
            row = await self._upsert_completed(user_id, content_id)

        return LearningItemProgress(
            id=content.id,
            screen_title=content.screen_title,
            order_index=content.order_index,
            completed=row.completed,
            completed_at=row.completed_at,
        )

    async def mark_section_complete(self, user_id: uuid.UUID, section_id: uuid.UUID) -> SectionLearningProgress:
        """Mark every screen in the section complete, all or nothing."""
        await self._get_section(section_id)
        await self.ledger.get_standing(user_id)

        items = await self._section_items(section_id)
        async with atomic(self.session):
            for item in items:
                await self._upsert_completed(user_id, item.id)

        logger.info(
            "Section learning content completed",
            extra={"user_id": str(user_id), "section_id": str(section_id), "items": len(items)},
        )
        return await self.section_progress(user_id, section_id)

    async def section_progress(self, user_id: uuid.UUID, section_id: uuid.UUID) -> SectionLearningProgress:
        """Per-screen completion plus completed/total/percentage."""
        await self._get_section(section_id)
        q = (
            select(LearningContent, LearningProgress)
            .outerjoin(
                LearningProgress,
                (LearningProgress.learning_content_id == LearningContent.id)
                & (LearningProgress.user_id == user_id),
            )
            .where(LearningContent.section_id == section_id)
            .order_by(LearningContent.order_index)
        )
        rows = (await self.session.execute(q)).all()
        items = [
            LearningItemProgress(
                id=content.id,
                screen_title=content.screen_title,
                order_index=content.order_index,
                completed=bool(progress and progress.completed),
                completed_at=progress.completed_at if progress else None,
            )
            for content, progress in rows
        ]
        completed = sum(1 for i in items if i.completed)
        return SectionLearningProgress(
            section_id=section_id,
            progress=items,
            completed_count=completed,
            total_count=len(items),
            completion_percentage=percentage(completed, len(items)),
        )

    async def _get_section(self, section_id: uuid.UUID) -> Section:
        section = await self.session.get(Section, section_id)
        if section is None:
            raise NotFound(f"Section {section_id} not found")
        return section

    async def _section_items(self, section_id: uuid.UUID) -> List[LearningContent]:
        q = (
            select(LearningContent)
            .where(LearningContent.section_id == section_id)
            .order_by(LearningContent.order_index)
        )
        return list((await self.session.execute(q)).scalars().all())
