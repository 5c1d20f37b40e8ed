"""
XP Ledger - cumulative XP and derived level per learner.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from secaware.config import Settings, get_settings
from secaware.kernel.errors import InvalidInput, NotFound
from secaware.kernel.models.user import User
from secaware.logging_config import get_logger

logger = get_logger(__name__)


def level_for(total_xp: int, xp_per_level: int = 100) -> int:
    """level = floor(total_xp / xp_per_level) + 1"""
    if total_xp < 0:
        raise InvalidInput("total_xp cannot be negative")
    return total_xp // xp_per_level + 1


class XPStanding(BaseModel):
    """A learner's current XP total and level."""

    user_id: uuid.UUID
    total_xp: int
    level: int


class LeaderboardEntry(BaseModel):
    """Single leaderboard row."""

    rank: int
    user_id: uuid.UUID
    display_name: Optional[str] = None
    total_xp: int
    level: int


class XPLedger:
    """
    Only writer of User.total_xp / User.level.

    award() is a single UPDATE so concurrent awards for the same learner
    serialize on the row instead of racing through read-then-write.
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()

    async def get_standing(self, user_id: uuid.UUID) -> XPStanding:
        """Current XP and level; NotFound for unknown learners."""
        q = select(User.total_xp, User.level).where(User.id == user_id)
        row = (await self.session.execute(q)).one_or_none()
        if row is None:
            raise NotFound(f"User {user_id} not found")
        return XPStanding(user_id=user_id, total_xp=row.total_xp, level=row.level)

    async def award(self, user_id: uuid.UUID, delta: int) -> XPStanding:
        """Add delta (>= 0) to the learner's XP and recompute the level."""
        if delta < 0:
            raise InvalidInput("XP delta cannot be negative")
        if delta == 0:
            return await self.get_standing(user_id)

        per_level = self.settings.xp_per_level
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                total_xp=User.total_xp + delta,
                level=(User.total_xp + delta) // per_level + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise NotFound(f"User {user_id} not found")

        standing = await self.get_standing(user_id)
        logger.info(
            "XP awarded",
            extra={"user_id": str(user_id), "delta": delta, "total_xp": standing.total_xp},
        )
        return standing

    async def leaderboard(self, limit: int = 10, offset: int = 0) -> List[LeaderboardEntry]:
        """Learners by XP, then level, then name."""
        if limit < 1 or offset < 0:
            raise InvalidInput("limit must be positive and offset non-negative")
        q = (
            select(User.id, User.display_name, User.total_xp, User.level)
            .order_by(User.total_xp.desc(), User.level.desc(), User.display_name)
            .limit(limit)
            .offset(offset)
        )
        rows = (await self.session.execute(q)).all()
        return [
            LeaderboardEntry(
                rank=offset + i + 1,
                user_id=r.id,
                display_name=r.display_name,
                total_xp=r.total_xp,
                level=r.level,
            )
            for i, r in enumerate(rows)
        ]
