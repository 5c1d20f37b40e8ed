"""
Curriculum content: modules, sections, learning screens and questions.

Read-only to the progress engine; authored by content scripts.
"""

import uuid
from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from secaware.kernel.models.base import Base, TimestampMixin, generate_uuid


class Module(Base, TimestampMixin):
    """Ordered container of sections."""

    __tablename__ = "modules"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)

    sections: Mapped[List["Section"]] = relationship(
        "Section",
        back_populates="module",
        order_by="Section.order_index",
    )


class Section(Base, TimestampMixin):
    """Smallest curriculum unit: learning screens and/or quiz questions."""

    __tablename__ = "sections"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    module_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)

    module: Mapped["Module"] = relationship("Module", back_populates="sections")

    __table_args__ = (
        UniqueConstraint("module_id", "name", name="uq_sections_module_name"),
        UniqueConstraint("module_id", "order_index", name="uq_sections_module_order"),
    )


class LearningContent(Base, TimestampMixin):
    """One reading screen within a section."""

    __tablename__ = "learning_content"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    section_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    screen_title: Mapped[str] = mapped_column(String(255), nullable=False)
    read_time_min: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    content_markdown: Mapped[str] = mapped_column(Text, nullable=False, default="")
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("section_id", "order_index", name="uq_learning_content_section_order"),
    )


class Question(Base, TimestampMixin):
    """Multiple-choice question. options is a JSON list of answer strings."""

    __tablename__ = "questions"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    section_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list] = mapped_column(JSON, nullable=False)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    explanation: Mapped[str] = mapped_column(Text, nullable=False, default="")
    question_type: Mapped[str] = mapped_column(String(50), nullable=False, default="multiple_choice")
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
