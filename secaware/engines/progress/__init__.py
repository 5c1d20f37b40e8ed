"""
Progress & Mastery Engine - completion, unlocking and XP for the curriculum.

Components:
- AnswerEvaluator: single answers, sticky correctness, XP at most once per question
- LearningContentTracker: per-screen completion records
- QuizScorer: stored quiz scores and whole-quiz submissions (newly-correct XP share + perfect bonus)
- is_section_completed: the one completion rule every listing uses
- resolve_availability: strict sequential unlocking of sections and modules
- DraftStore: quiz drafts and reading bookmarks (never affect XP/completion)
- XPLedger: total XP and level = total_xp // 100 + 1
"""

from secaware.engines.progress.achievements import Achievement, evaluate_achievements
from secaware.engines.progress.answer_evaluator import (
    AnswerEvaluator,
    AnswerResult,
    SectionQuestionProgress,
    decide_attempt,
)
from secaware.engines.progress.completion import SectionFacts, is_section_completed, load_section_facts
from secaware.engines.progress.content_tracker import LearningContentTracker, SectionLearningProgress
from secaware.engines.progress.curriculum_progress import (
    CurriculumProgress,
    ModuleStatus,
    SectionStatus,
    UserStats,
)
from secaware.engines.progress.drafts import DraftStore, QuizDraftState, ReadingResume
from secaware.engines.progress.ledger import XPLedger, XPStanding, level_for
from secaware.engines.progress.quiz_scorer import QuizScore, QuizScorer, QuizSubmission
from secaware.engines.progress.unlock import Gate, resolve_availability

__all__ = [
    "Achievement",
    "evaluate_achievements",
    "AnswerEvaluator",
    "AnswerResult",
    "SectionQuestionProgress",
    "decide_attempt",
    "SectionFacts",
    "is_section_completed",
    "load_section_facts",
    "LearningContentTracker",
    "SectionLearningProgress",
    "CurriculumProgress",
    "ModuleStatus",
    "SectionStatus",
    "UserStats",
    "DraftStore",
    "QuizDraftState",
    "ReadingResume",
    "XPLedger",
    "XPStanding",
    "level_for",
    "QuizScore",
    "QuizScorer",
    "QuizSubmission",
    "Gate",
    "resolve_availability",
]
