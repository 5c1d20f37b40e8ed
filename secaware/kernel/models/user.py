"""
Learner account as seen by the progress engine.

Identity and credentials are owned by the auth service; this table only
carries what the XP ledger needs.
"""

import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from secaware.kernel.models.base import Base, TimestampMixin, generate_uuid


class User(Base, TimestampMixin):
    """Learner with cumulative XP. total_xp and level change only through the ledger."""
    
    __tablename__ = "users"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    display_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    total_xp: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    level: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )

    __table_args__ = (CheckConstraint("total_xp >= 0", name="ck_users_total_xp_non_negative"),)
    
    def __repr__(self) -> str:
        return f"<User {self.email} xp={self.total_xp}>"
