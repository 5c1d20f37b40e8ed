"""
Achievements derived from the XP ledger and answer history.
"""

from dataclasses import dataclass
from typing import Callable, List

from pydantic import BaseModel


class Achievement(BaseModel):
    """A badge and whether the learner has earned it."""

    id: int
    title: str
    description: str
    earned: bool


@dataclass(frozen=True)
class _Rule:
    id: int
    title: str
    description: str
    check: Callable[[int, int, int], bool]  # (total_xp, level, correct_answers)


RULES = (
    _Rule(1, "First Steps", "Complete your first quiz", lambda xp, level, correct: xp > 0),
    _Rule(2, "Knowledge Seeker", "Reach Level 5", lambda xp, level, correct: level >= 5),
    _Rule(3, "Security Enthusiast", "Reach Level 10", lambda xp, level, correct: level >= 10),
    _Rule(4, "XP Collector", "Earn 500 XP", lambda xp, level, correct: xp >= 500),
    _Rule(5, "Quiz Master", "Answer 50 questions correctly", lambda xp, level, correct: correct >= 50),
)


def evaluate_achievements(total_xp: int, level: int, correct_answers: int) -> List[Achievement]:
    return [
        Achievement(
            id=rule.id,
            title=rule.title,
            description=rule.description,
            earned=rule.check(total_xp, level, correct_answers),
        )
        for rule in RULES
    ]
