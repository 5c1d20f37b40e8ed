"""
FastAPI dependencies for the acting learner and database sessions.

Authentication happens upstream; the gateway forwards the verified learner
id in the X-User-ID header.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from secaware.database import get_db
from secaware.kernel.models.user import User
from secaware.logging_config import learner_id_var

USER_ID_HEADER = "X-User-ID"


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user(
    db: DbSession,
    x_user_id: Annotated[Optional[str], Header(alias=USER_ID_HEADER)] = None,
) -> User:
    """Resolve the authenticated learner or raise 401."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid learner id",
        )

    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    learner_id_var.set(str(user.id))
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
