"""
API v1 routes.
"""

from fastapi import APIRouter

from secaware.api.v1 import modules, sections, questions, learning_content, users

router = APIRouter()

router.include_router(modules.router, prefix="/modules", tags=["Modules"])
router.include_router(sections.router, prefix="/sections", tags=["Sections"])
router.include_router(questions.router, prefix="/questions", tags=["Questions"])
router.include_router(learning_content.router, prefix="/learning-content", tags=["Learning Content"])
router.include_router(users.router, prefix="/user", tags=["User"])
