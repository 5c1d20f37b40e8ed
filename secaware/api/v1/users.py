"""
Learner endpoints - XP standing, statistics, achievements, leaderboard.
"""

from typing import List

from fastapi import APIRouter, Query

from secaware.api.deps import CurrentUser, DbSession
from secaware.engines.progress.achievements import Achievement, evaluate_achievements
from secaware.engines.progress.curriculum_progress import CurriculumProgress, UserStats
from secaware.engines.progress.ledger import LeaderboardEntry, XPLedger, XPStanding

router = APIRouter()


@router.get("/xp", response_model=XPStanding)
async def get_xp(user: CurrentUser, db: DbSession):
    return await XPLedger(db).get_standing(user.id)


@router.get("/stats", response_model=UserStats)
async def get_stats(user: CurrentUser, db: DbSession):
    return await CurriculumProgress(db).user_stats(user.id)


@router.get("/achievements", response_model=List[Achievement])
async def get_achievements(user: CurrentUser, db: DbSession):
    stats = await CurriculumProgress(db).user_stats(user.id)
    return evaluate_achievements(stats.total_xp, stats.level, stats.total_correct_answers)


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    user: CurrentUser,
    db: DbSession,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
):
    return await XPLedger(db).leaderboard(limit=limit, offset=offset)
