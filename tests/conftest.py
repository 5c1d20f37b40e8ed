"""
Pytest fixtures for progress engine tests.

Every test gets its own file-backed SQLite database so savepoints and
multiple connections behave like the real deployment.
"""

import os
import tempfile
import uuid
from typing import AsyncGenerator, Dict, List, Optional

# Point the app at SQLite before secaware.database builds its engine
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_tmp.name}")

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from secaware.config import Settings, get_settings
from secaware.database import create_engine_for
from secaware.kernel.models import Base, LearningContent, Module, Question, Section, User

get_settings.cache_clear()


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a fresh SQLite database for one test."""
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'progress.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite+aiosqlite://")


@pytest_asyncio.fixture
async def learner(db_session: AsyncSession) -> User:
    """Create a learner with no XP."""
    user = User(
        id=uuid.uuid4(),
        email="learner@example.com",
        display_name="Test Learner",
    )
    db_session.add(user)
    await db_session.commit()
    return user


class CurriculumFactory:
    """Builds modules and sections; every question has options ["wrong", "right"]."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def module(self, order_index: int, name: Optional[str] = None) -> Module:
        module = Module(
            name=name or f"module-{order_index}",
            display_name=f"Module {order_index}",
            order_index=order_index,
        )
        self.session.add(module)
        await self.session.flush()
        return module

    async def section(
        self,
        module: Module,
        order_index: int,
        *,
        screens: int = 0,
        questions: int = 0,
        name: Optional[str] = None,
    ) -> Section:
        section = Section(
            module_id=module.id,
            name=name or f"{module.name}-section-{order_index}",
            display_name=f"Section {order_index}",
            order_index=order_index,
        )
        self.session.add(section)
        await self.session.flush()
        for i in range(screens):
            self.session.add(
                LearningContent(
                    section_id=section.id,
                    screen_title=f"Screen {i}",
                    read_time_min=2,
                    content_markdown=f"# Screen {i}",
                    order_index=i,
                )
            )
        for i in range(questions):
            self.session.add(
                Question(
                    section_id=section.id,
                    question_text=f"Question {i}?",
                    options=["wrong", "right"],
                    correct_answer="right",
                    explanation="Because it is right.",
                    order_index=i,
                )
            )
        await self.session.flush()
        return section

    async def questions(self, section: Section) -> List[Question]:
        q = select(Question).where(Question.section_id == section.id).order_by(Question.order_index)
        return list((await self.session.execute(q)).scalars().all())

    async def screens(self, section: Section) -> List[LearningContent]:
        q = (
            select(LearningContent)
            .where(LearningContent.section_id == section.id)
            .order_by(LearningContent.order_index)
        )
        return list((await self.session.execute(q)).scalars().all())


@pytest.fixture
def factory(db_session: AsyncSession) -> CurriculumFactory:
    return CurriculumFactory(db_session)


@pytest_asyncio.fixture
async def curriculum(db_session: AsyncSession, factory: CurriculumFactory) -> Dict[str, object]:
    """
    Two modules:

    module-1: phishing (2 screens + 2 questions), passwords (4 questions),
              empty (nothing), wrapup (1 screen)
    module-2: network (1 question)
    """
    first = await factory.module(1)
    phishing = await factory.section(first, 1, screens=2, questions=2, name="phishing")
    passwords = await factory.section(first, 2, questions=4, name="passwords")
    empty = await factory.section(first, 3, name="empty")
    wrapup = await factory.section(first, 4, screens=1, name="wrapup")

    second = await factory.module(2)
    network = await factory.section(second, 1, questions=1, name="network")
    await db_session.commit()

    return {
        "modules": [first, second],
        "phishing": phishing,
        "passwords": passwords,
        "empty": empty,
        "wrapup": wrapup,
        "network": network,
    }
