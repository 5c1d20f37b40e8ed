"""
Pure scoring helpers shared by the quiz scorer, completion resolver and listings.
"""

import math


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (2.5 -> 3, not 2)."""
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    """Integer percentage of part/whole, 0 when whole is 0."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def quiz_passed(correct: int, total: int, threshold: float) -> bool:
    """A quiz with no questions is never passed."""
    if total <= 0:
        return False
    return correct / total >= threshold


def quiz_submission_xp(
    new_correct: int,
    total_questions: int,
    *,
    max_xp: int = 50,
    perfect_bonus: int = 25,
    all_correct_now: bool = False,
) -> int:
    """
    XP for one quiz submission.

    Scales max_xp by the share of answers that are newly correct. The
    perfect bonus applies only when every question is correct in this
    submission and every one of them is newly correct, so retakes cannot
    collect it again.
    """
    if total_questions <= 0:
        return 0
    xp = round_half_up(new_correct / total_questions * max_xp)
    if all_correct_now and new_correct == total_questions:
        xp += perfect_bonus
    return xp
