"""Integration tests for learning-screen progress, quiz drafts and reading bookmarks."""

import uuid

import pytest
from sqlalchemy import delete

from secaware.engines.progress.content_tracker import LearningContentTracker
from secaware.engines.progress.drafts import DraftStore
from secaware.kernel.errors import InvalidInput, NotFound
from secaware.kernel.models.curriculum import LearningContent


class TestLearningContentTracker:
    @pytest.mark.asyncio
    async def test_mark_single_screen(self, db_session, learner, curriculum, factory):
        section = curriculum["phishing"]
        first, _ = await factory.screens(section)
        tracker = LearningContentTracker(db_session)

        item = await tracker.mark_complete(learner.id, first.id)
        assert item.completed is True
        assert item.completed_at is not None

        progress = await tracker.section_progress(learner.id, section.id)
        assert progress.completed_count == 1
        assert progress.total_count == 2
        assert progress.completion_percentage == 50
        assert [i.completed for i in progress.progress] == [True, False]

    @pytest.mark.asyncio
    async def test_marking_twice_keeps_one_record(self, db_session, learner, curriculum, factory):
        section = curriculum["wrapup"]
        (screen,) = await factory.screens(section)
        tracker = LearningContentTracker(db_session)

        await tracker.mark_complete(learner.id, screen.id)
        await tracker.mark_complete(learner.id, screen.id)

        progress = await tracker.section_progress(learner.id, section.id)
        assert progress.completed_count == 1
        assert progress.completion_percentage == 100

    @pytest.mark.asyncio
    async def test_mark_section_complete(self, db_session, learner, curriculum):
        section = curriculum["phishing"]
        progress = await LearningContentTracker(db_session).mark_section_complete(learner.id, section.id)
        assert progress.completed_count == 2
        assert progress.completion_percentage == 100

    @pytest.mark.asyncio
    async def test_section_without_screens(self, db_session, learner, curriculum):
        progress = await LearningContentTracker(db_session).section_progress(learner.id, curriculum["passwords"].id)
        assert progress.total_count == 0
        assert progress.completion_percentage == 0

    @pytest.mark.asyncio
    async def test_unknown_content(self, db_session, learner, curriculum):
        tracker = LearningContentTracker(db_session)
        with pytest.raises(NotFound):
            await tracker.mark_complete(learner.id, uuid.uuid4())
        with pytest.raises(NotFound):
            await tracker.mark_section_complete(learner.id, uuid.uuid4())


class TestQuizDrafts:
    @pytest.mark.asyncio
    async def test_save_and_restore(self, db_session, learner, curriculum):
        section = curriculum["passwords"]
        drafts = DraftStore(db_session)

        await drafts.save_quiz_draft(learner.id, section.id, 1, {0: "right"})
        saved = await drafts.save_quiz_draft(learner.id, section.id, 2, {0: "right", 1: "wrong"})
        assert saved.current_question_index == 2

        restored = await drafts.get_quiz_draft(learner.id, section.id)
        assert restored.current_question_index == 2
        assert restored.draft_answers == {0: "right", 1: "wrong"}

    @pytest.mark.asyncio
    async def test_clear(self, db_session, learner, curriculum):
        section = curriculum["passwords"]
        drafts = DraftStore(db_session)
        await drafts.save_quiz_draft(learner.id, section.id, 0, {})
        await drafts.clear_quiz_draft(learner.id, section.id)
        assert await drafts.get_quiz_draft(learner.id, section.id) is None

    @pytest.mark.asyncio
    async def test_out_of_range_rejected(self, db_session, learner, curriculum):
        section = curriculum["passwords"]
        drafts = DraftStore(db_session)
        with pytest.raises(InvalidInput):
            await drafts.save_quiz_draft(learner.id, section.id, 4, {})
        with pytest.raises(InvalidInput):
            await drafts.save_quiz_draft(learner.id, section.id, 0, {5: "right"})
        with pytest.raises(InvalidInput):
            await drafts.save_quiz_draft(learner.id, curriculum["wrapup"].id, 0, {})
        assert await drafts.get_quiz_draft(learner.id, section.id) is None


class TestReadingPosition:
    @pytest.mark.asyncio
    async def test_resume_where_left_off(self, db_session, learner, curriculum):
        section = curriculum["phishing"]
        drafts = DraftStore(db_session)

        assert (await drafts.resume_reading(learner.id, section.id)).step_index == 0

        await drafts.save_reading_position(learner.id, section.id, 1)
        resume = await drafts.resume_reading(learner.id, section.id)
        assert resume.step_index == 1
        assert resume.total_steps == 2

    @pytest.mark.asyncio
    async def test_stale_bookmark_resets_to_start(self, db_session, learner, curriculum):
        section = curriculum["phishing"]
        drafts = DraftStore(db_session)
        await drafts.save_reading_position(learner.id, section.id, 1)

        await db_session.execute(
            delete(LearningContent).where(
                LearningContent.section_id == section.id,
                LearningContent.order_index == 1,
            )
        )

        resume = await drafts.resume_reading(learner.id, section.id)
        assert resume.step_index == 0
        assert resume.total_steps == 1

    @pytest.mark.asyncio
    async def test_negative_step_rejected(self, db_session, learner, curriculum):
        with pytest.raises(InvalidInput):
            await DraftStore(db_session).save_reading_position(learner.id, curriculum["phishing"].id, -1)

    @pytest.mark.asyncio
    async def test_unknown_section(self, db_session, learner):
        with pytest.raises(NotFound):
            await DraftStore(db_session).resume_reading(learner.id, uuid.uuid4())
