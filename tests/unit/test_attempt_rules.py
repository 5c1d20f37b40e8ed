"""Unit tests for attempt decisions, reading bookmarks and achievements."""

import uuid

from secaware.engines.progress.achievements import evaluate_achievements
from secaware.engines.progress.answer_evaluator import AttemptOutcome, decide_attempt
from secaware.engines.progress.drafts import clamp_step
from secaware.kernel.models.progress import QuestionAttempt


def attempt(is_correct: bool, xp_awarded: int) -> QuestionAttempt:
    return QuestionAttempt(
        user_id=uuid.uuid4(),
        question_id=uuid.uuid4(),
        is_correct=is_correct,
        selected_answer="x",
        xp_awarded=xp_awarded,
    )


class TestDecideAttempt:
    def test_first_correct_answer_writes_and_awards(self):
        decision = decide_attempt(None, True)
        assert decision.write and decision.award

    def test_first_incorrect_answer_writes_without_xp(self):
        decision = decide_attempt(None, False)
        assert decision.write and not decision.award

    def test_incorrect_never_overwrites(self):
        decision = decide_attempt(attempt(True, 10), False)
        assert not decision.write and not decision.award

    def test_correct_after_incorrect_awards(self):
        decision = decide_attempt(attempt(False, 0), True)
        assert decision.write and decision.award

    def test_correct_again_does_not_award(self):
        decision = decide_attempt(attempt(True, 10), True)
        assert decision.write and not decision.award

    def test_already_awarded_flag(self):
        outcome = AttemptOutcome(attempt=attempt(True, 10), written=False, newly_correct=False)
        assert outcome.already_awarded is True
        fresh = AttemptOutcome(attempt=attempt(True, 10), written=True, newly_correct=True)
        assert fresh.already_awarded is False


class TestClampStep:
    def test_valid_step_kept(self):
        assert clamp_step(2, 5) == 2

    def test_missing_step(self):
        assert clamp_step(None, 5) == 0

    def test_step_past_end_resets(self):
        """Content shrank since the bookmark was saved."""
        assert clamp_step(5, 5) == 0

    def test_no_steps(self):
        assert clamp_step(3, 0) == 0


class TestAchievements:
    def test_new_learner_has_none(self):
        assert not any(a.earned for a in evaluate_achievements(0, 1, 0))

    def test_thresholds(self):
        earned = {a.title for a in evaluate_achievements(500, 6, 50) if a.earned}
        assert earned == {"First Steps", "Knowledge Seeker", "XP Collector", "Quiz Master"}

    def test_stable_order(self):
        assert [a.id for a in evaluate_achievements(0, 1, 0)] == [1, 2, 3, 4, 5]
