"""Unit tests for scoring helpers and the XP level formula."""

import pytest

from secaware.engines.progress.ledger import level_for
from secaware.engines.progress.scoring import (
    percentage,
    quiz_passed,
    quiz_submission_xp,
    round_half_up,
)
from secaware.kernel.errors import InvalidInput


class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(12.5) == 13

    def test_below_half_rounds_down(self):
        assert round_half_up(2.49) == 2

    def test_percentage_of_nothing_is_zero(self):
        assert percentage(0, 0) == 0

    def test_percentage_rounds(self):
        assert percentage(1, 3) == 33
        assert percentage(2, 3) == 67
        assert percentage(4, 4) == 100


class TestQuizPassed:
    def test_exactly_at_threshold_passes(self):
        assert quiz_passed(7, 10, 0.70) is True

    def test_below_threshold_fails(self):
        assert quiz_passed(3, 5, 0.70) is False

    def test_same_score_differs_by_threshold(self):
        """3/4 passes the unlock threshold but not the statistics one."""
        assert quiz_passed(3, 4, 0.70) is True
        assert quiz_passed(3, 4, 0.80) is False

    def test_no_questions_never_passes(self):
        assert quiz_passed(0, 0, 0.70) is False


class TestQuizSubmissionXP:
    def test_all_new_and_perfect_gets_bonus(self):
        """2 of 2 newly correct: 50 + 25."""
        assert quiz_submission_xp(2, 2, all_correct_now=True) == 75

    def test_partial_share(self):
        assert quiz_submission_xp(6, 10) == 30

    def test_retake_perfect_without_bonus(self):
        """10/10 on a retake where only 4 were newly correct."""
        assert quiz_submission_xp(4, 10, all_correct_now=True) == 20

    def test_nothing_new_earns_nothing(self):
        assert quiz_submission_xp(0, 4, all_correct_now=True) == 0

    def test_share_rounds_half_up(self):
        """1/4 of 50 = 12.5 -> 13."""
        assert quiz_submission_xp(1, 4) == 13

    def test_empty_quiz(self):
        assert quiz_submission_xp(0, 0, all_correct_now=True) == 0

    def test_custom_amounts(self):
        assert quiz_submission_xp(1, 1, max_xp=100, perfect_bonus=10, all_correct_now=True) == 110


class TestLevel:
    @pytest.mark.parametrize(
        "total_xp,level",
        [(0, 1), (99, 1), (100, 2), (150, 2), (1000, 11)],
    )
    def test_level_boundaries(self, total_xp, level):
        assert level_for(total_xp) == level

    def test_negative_xp_rejected(self):
        with pytest.raises(InvalidInput):
            level_for(-1)
