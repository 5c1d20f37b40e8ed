"""
Module endpoints - curriculum listing with completion and availability.
"""

import uuid
from typing import List

from fastapi import APIRouter

from secaware.api.deps import CurrentUser, DbSession
from secaware.engines.progress.curriculum_progress import CurriculumProgress, ModuleStatus, SectionStatus

router = APIRouter()


@router.get("", response_model=List[ModuleStatus])
async def list_modules(user: CurrentUser, db: DbSession):
    """All modules in order with completion percentage and availability."""
    return await CurriculumProgress(db).list_modules(user.id)


@router.get("/{module_id}", response_model=ModuleStatus)
async def get_module(module_id: uuid.UUID, user: CurrentUser, db: DbSession):
    return await CurriculumProgress(db).get_module(user.id, module_id)


@router.get("/{module_id}/sections", response_model=List[SectionStatus])
async def list_sections(module_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Sections of a module with completed/available flags."""
    return await CurriculumProgress(db).list_sections(user.id, module_id)
