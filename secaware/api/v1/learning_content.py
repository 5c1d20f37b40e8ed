"""
Learning content endpoints - screen completion and section reading progress.
"""

import uuid

from fastapi import APIRouter

from secaware.api.deps import CurrentUser, DbSession
from secaware.engines.progress.content_tracker import (
    LearningContentTracker,
    LearningItemProgress,
    SectionLearningProgress,
)

router = APIRouter()


@router.post("/{content_id}/complete", response_model=LearningItemProgress)
async def complete_content(content_id: uuid.UUID, user: CurrentUser, db: DbSession):
    return await LearningContentTracker(db).mark_complete(user.id, content_id)


@router.get("/section/{section_id}/progress", response_model=SectionLearningProgress)
async def get_section_progress(section_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Per-screen completion with completed/total/percentage."""
    return await LearningContentTracker(db).section_progress(user.id, section_id)
