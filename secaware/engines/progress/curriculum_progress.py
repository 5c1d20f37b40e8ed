"""
Curriculum Progress - module/section listings and learner statistics.

All completion flags come from completion.is_section_completed and all
availability flags from unlock.resolve_availability; nothing here decides
completion on its own.
"""

import uuid
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Set

from pydantic import BaseModel
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from secaware.config import Settings, get_settings
from secaware.engines.progress.completion import SectionFacts, is_section_completed, load_section_facts
from secaware.engines.progress.ledger import XPLedger
from secaware.engines.progress.scoring import percentage, quiz_passed
from secaware.engines.progress.unlock import Gate, module_gate, resolve_availability
from secaware.kernel.errors import NotFound
from secaware.kernel.models.curriculum import LearningContent, Module, Question, Section
from secaware.kernel.models.progress import LearningProgress, QuestionAttempt, QuizDraft, ReadingPosition


class SectionStatus(BaseModel):
    """One section in a module listing."""

    id: uuid.UUID
    module_id: uuid.UUID
    name: str
    title: str
    description: Optional[str] = None
    order_index: int
    has_learning_content: bool
    has_quiz: bool
    question_count: int
    correct_answers: int
    answered_questions: int
    learning_completed: int
    learning_total: int
    completed: bool
    available: bool
    learned: bool
    completion_percentage: int
    accuracy_percentage: int


class ModuleStatus(BaseModel):
    """One module in the curriculum listing."""

    id: uuid.UUID
    name: str
    title: str
    description: Optional[str] = None
    order_index: int
    section_count: int
    completed_sections: int
    completion_percentage: int
    completed: bool
    available: bool
    has_started: bool


class UserStats(BaseModel):
    """Profile statistics for a learner."""

    modules_completed: int
    sections_completed: int
    quizzes_passed: int
    days_active: int
    total_questions_answered: int
    total_correct_answers: int
    total_xp_earned: int
    total_xp: int
    level: int


def _day(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value else None


class CurriculumProgress:
    """Read-only progress views over the whole curriculum for one learner."""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.ledger = XPLedger(session, self.settings)

    async def _modules(self) -> List[Module]:
        q = select(Module).order_by(Module.order_index)
        return list((await self.session.execute(q)).scalars().all())

    async def _sections(self, module_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, List[Section]]:
        ids = list(module_ids)
        by_module: Dict[uuid.UUID, List[Section]] = {mid: [] for mid in ids}
        if not ids:
            return by_module
        q = select(Section).where(Section.module_id.in_(ids)).order_by(Section.module_id, Section.order_index)
        for section in (await self.session.execute(q)).scalars().all():
            by_module[section.module_id].append(section)
        return by_module

    def _gates(self, sections: List[Section], facts: Dict[uuid.UUID, SectionFacts], threshold: float) -> List[Gate]:
        return [
            Gate(
                completed=is_section_completed(facts[s.id], threshold),
                completable=facts[s.id].completable,
            )
            for s in sections
        ]

    async def _started_sections(self, user_id: uuid.UUID, section_ids: List[uuid.UUID]) -> Set[uuid.UUID]:
        """Sections with a reading bookmark past step 0, a quiz draft or any learning record."""
        if not section_ids:
            return set()
        started: Set[uuid.UUID] = set()
        reading_q = select(ReadingPosition.section_id).where(
            ReadingPosition.user_id == user_id,
            ReadingPosition.section_id.in_(section_ids),
            ReadingPosition.last_step_index > 0,
        )
        draft_q = select(QuizDraft.section_id).where(
            QuizDraft.user_id == user_id,
            QuizDraft.section_id.in_(section_ids),
        )
        learning_q = (
            select(LearningContent.section_id)
            .join(LearningProgress, LearningProgress.learning_content_id == LearningContent.id)
            .where(
                LearningProgress.user_id == user_id,
                LearningContent.section_id.in_(section_ids),
            )
        )
        for q in (reading_q, draft_q, learning_q):
            started.update((await self.session.execute(q)).scalars().all())
        return started

    async def list_modules(self, user_id: uuid.UUID) -> List[ModuleStatus]:
        """Every module with completion percentage, availability and started flag."""
        threshold = self.settings.unlock_pass_threshold
        modules = await self._modules()
        sections = await self._sections(m.id for m in modules)
        all_ids = [s.id for group in sections.values() for s in group]
        facts = await load_section_facts(self.session, user_id, all_ids)
        started = await self._started_sections(user_id, all_ids)

        gates_by_module = {m.id: self._gates(sections[m.id], facts, threshold) for m in modules}
        module_gates = [module_gate(gates_by_module[m.id]) for m in modules]
        availability = resolve_availability(module_gates, enforce=self.settings.enforce_sequential_unlock)

        result = []
        for module, gate, available in zip(modules, module_gates, availability):
            gates = gates_by_module[module.id]
            completed_sections = sum(1 for g in gates if g.completed)
            completable = sum(1 for g in gates if g.completable)
            has_started = completed_sections > 0 or any(s.id in started for s in sections[module.id])
            result.append(
                ModuleStatus(
                    id=module.id,
                    name=module.name,
                    title=module.display_name,
                    description=module.description,
                    order_index=module.order_index,
                    section_count=len(gates),
                    completed_sections=completed_sections,
                    completion_percentage=percentage(completed_sections, completable),
                    completed=gate.completable and gate.completed,
                    available=available,
                    has_started=has_started,
                )
            )
        return result

    async def get_module(self, user_id: uuid.UUID, module_id: uuid.UUID) -> ModuleStatus:
        for module in await self.list_modules(user_id):
            if module.id == module_id:
                return module
        raise NotFound(f"Module {module_id} not found")

    async def list_sections(self, user_id: uuid.UUID, module_id: uuid.UUID) -> List[SectionStatus]:
        """Sections of a module in order, with completion and availability."""
        module_status = await self.get_module(user_id, module_id)
        threshold = self.settings.unlock_pass_threshold
        sections = (await self._sections([module_id]))[module_id]
        facts = await load_section_facts(self.session, user_id, [s.id for s in sections])
        gates = self._gates(sections, facts, threshold)
        availability = resolve_availability(
            gates,
            enforce=self.settings.enforce_sequential_unlock,
            first_available=module_status.available,
        )
        answered = await self._answered_counts(user_id, [s.id for s in sections])

        result = []
        for section, gate, available in zip(sections, gates, availability):
            f = facts[section.id]
            answered_count = answered.get(section.id, 0)
            result.append(
                SectionStatus(
                    id=section.id,
                    module_id=section.module_id,
                    name=section.name,
                    title=section.display_name,
                    description=section.description,
                    order_index=section.order_index,
                    has_learning_content=f.has_learning_content,
                    has_quiz=f.has_quiz,
                    question_count=f.question_total,
                    correct_answers=f.questions_correct,
                    answered_questions=answered_count,
                    learning_completed=f.learning_completed,
                    learning_total=f.learning_total,
                    completed=gate.completed,
                    available=available,
                    learned=answered_count > 0 or f.learning_completed > 0,
                    completion_percentage=f.quiz_percentage,
                    accuracy_percentage=percentage(f.questions_correct, answered_count),
                )
            )
        return result

    async def is_section_available(self, user_id: uuid.UUID, section_id: uuid.UUID) -> bool:
        section = await self.session.get(Section, section_id)
        if section is None:
            raise NotFound(f"Section {section_id} not found")
        for status in await self.list_sections(user_id, section.module_id):
            if status.id == section_id:
                return status.available
        return False

    async def _answered_counts(self, user_id: uuid.UUID, section_ids: List[uuid.UUID]) -> Dict[uuid.UUID, int]:
        if not section_ids:
            return {}
        q = (
            select(Question.section_id, func.count(QuestionAttempt.id))
            .join(QuestionAttempt, QuestionAttempt.question_id == Question.id)
            .where(QuestionAttempt.user_id == user_id, Question.section_id.in_(section_ids))
            .group_by(Question.section_id)
        )
        return {sid: count for sid, count in (await self.session.execute(q)).all()}

    async def user_stats(self, user_id: uuid.UUID) -> UserStats:
        """Statistics use the stats pass threshold; see Settings.stats_pass_threshold."""
        standing = await self.ledger.get_standing(user_id)
        threshold = self.settings.stats_pass_threshold

        modules = await self._modules()
        sections = await self._sections(m.id for m in modules)
        all_ids = [s.id for group in sections.values() for s in group]
        facts = await load_section_facts(self.session, user_id, all_ids)

        sections_completed = 0
        quizzes_passed = 0
        for f in facts.values():
            if is_section_completed(f, threshold):
                sections_completed += 1
            if quiz_passed(f.questions_correct, f.question_total, threshold):
                quizzes_passed += 1

        modules_completed = 0
        for module in modules:
            gate = module_gate(self._gates(sections[module.id], facts, threshold))
            if gate.completable and gate.completed:
                modules_completed += 1

        attempts_q = select(
            func.count(QuestionAttempt.id),
            func.coalesce(func.sum(case((QuestionAttempt.is_correct.is_(True), 1), else_=0)), 0),
            func.coalesce(func.sum(QuestionAttempt.xp_awarded), 0),
        ).where(QuestionAttempt.user_id == user_id)
        answered, correct, xp_earned = (await self.session.execute(attempts_q)).one()

        return UserStats(
            modules_completed=modules_completed,
            sections_completed=sections_completed,
            quizzes_passed=quizzes_passed,
            days_active=await self._days_active(user_id),
            total_questions_answered=answered,
            total_correct_answers=correct,
            total_xp_earned=xp_earned,
            total_xp=standing.total_xp,
            level=standing.level,
        )

    async def _days_active(self, user_id: uuid.UUID) -> int:
        """Distinct days with an answer, a finished screen or a reading step."""
        queries = (
            select(QuestionAttempt.answered_at).where(QuestionAttempt.user_id == user_id),
            select(LearningProgress.completed_at).where(
                LearningProgress.user_id == user_id,
                LearningProgress.completed_at.is_not(None),
            ),
            select(ReadingPosition.updated_at).where(ReadingPosition.user_id == user_id),
        )
        days: Set[date] = set()
        for q in queries:
            for value in (await self.session.execute(q)).scalars().all():
                day = _day(value)
                if day:
                    days.add(day)
        return len(days)
