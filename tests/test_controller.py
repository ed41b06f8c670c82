"""Tests for the workflow controller's state transitions."""

import asyncio

import pytest
from unittest.mock import MagicMock


class TestStart:
    @pytest.mark.asyncio
    async def test_outline_success_enters_reading(self, fake_client, sample_premise):
        from models.enums import AppState
        from workflow.controller import WorkflowController

        callback = MagicMock()
        controller = WorkflowController(fake_client, callback=callback)
        controller.store.set_error("old error")

        assert await controller.start(sample_premise) is True

        assert controller.store.app_state == AppState.READING
        assert controller.error is None
        assert controller.novel.premise == sample_premise
        assert controller.novel.cursor == 0
        assert [c.id for c in controller.novel.chapters] == [1, 2, 3]
        callback.on_outline_ready.assert_called_once_with(controller.novel)

    @pytest.mark.asyncio
    async def test_outline_failure_returns_to_setup(self, fake_client, sample_premise):
        from config.exceptions import LLMResponseParseError
        from models.enums import AppState
        from workflow.controller import WorkflowController
        from workflow.graph import OUTLINE_ERROR_MESSAGE

        fake_client.generate_outline.side_effect = LLMResponseParseError("no chapters")
        controller = WorkflowController(fake_client)

        assert await controller.start(sample_premise) is False

        assert controller.store.app_state == AppState.SETUP
        assert controller.novel is None
        assert controller.error == OUTLINE_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_unexpected_outline_failure_also_returns_to_setup(self, fake_client, sample_premise):
        from models.enums import AppState
        from workflow.controller import WorkflowController

        fake_client.generate_outline.side_effect = RuntimeError("socket closed")
        controller = WorkflowController(fake_client)

        assert await controller.start(sample_premise) is False
        assert controller.store.app_state == AppState.SETUP

    @pytest.mark.asyncio
    async def test_state_is_generating_outline_while_waiting(self, fake_client, sample_premise, sample_chapters, make_blocking):
        from config.exceptions import WorkflowStateError
        from models.enums import AppState
        from workflow.controller import WorkflowController

        event, wait = make_blocking(list(sample_chapters))
        fake_client.generate_outline.side_effect = wait
        controller = WorkflowController(fake_client)

        task = asyncio.create_task(controller.start(sample_premise))
        await asyncio.sleep(0)
        assert controller.store.app_state == AppState.GENERATING_OUTLINE
        with pytest.raises(WorkflowStateError):
            await controller.start(sample_premise)

        event.set()
        assert await task is True
        assert controller.store.app_state == AppState.READING

    @pytest.mark.asyncio
    async def test_start_rejected_while_reading(self, reading_controller, fake_client, sample_premise):
        from config.exceptions import LLMError, WorkflowStateError
        from models.enums import AppState

        fake_client.generate_outline.side_effect = LLMError("down")

        with pytest.raises(WorkflowStateError):
            await reading_controller.start(sample_premise)

        fake_client.generate_outline.assert_not_called()
        assert reading_controller.store.app_state == AppState.READING
        assert len(reading_controller.novel.chapters) == 3


class TestGenerateChapter:
    @pytest.mark.asyncio
    async def test_generate_stores_content(self, reading_controller, fake_client):
        assert await reading_controller.generate_chapter(0) is True

        chapter = reading_controller.novel.chapters[0]
        assert chapter.content == "نص الفصل"
        assert chapter.is_generating is False
        fake_client.generate_chapter_content.assert_awaited_once()
        # First chapter gets an empty continuity context
        assert fake_client.generate_chapter_content.call_args.args[2] == ""

    @pytest.mark.asyncio
    async def test_context_lists_earlier_summaries(self, reading_controller, fake_client, sample_chapters):
        await reading_controller.generate_chapter(2)

        context = fake_client.generate_chapter_content.call_args.args[2]
        assert context == (
            f"فصل 1: {sample_chapters[0].summary}\n"
            f"فصل 2: {sample_chapters[1].summary}"
        )

    @pytest.mark.asyncio
    async def test_flag_is_set_before_first_await(self, reading_controller, fake_client, make_blocking):
        event, wait = make_blocking("نص")
        fake_client.generate_chapter_content.side_effect = wait

        assert reading_controller.begin_generation(1) is True
        assert reading_controller.novel.chapters[1].is_generating is True

        task = asyncio.create_task(reading_controller.resolve(1, "generate"))
        await asyncio.sleep(0)
        assert reading_controller.novel.chapters[1].is_generating is True
        event.set()
        assert await task is True
        assert reading_controller.novel.chapters[1].is_generating is False

    @pytest.mark.asyncio
    async def test_second_request_while_generating_is_noop(self, reading_controller, fake_client, make_blocking):
        event, wait = make_blocking("نص")
        fake_client.generate_chapter_content.side_effect = wait

        first = asyncio.create_task(reading_controller.generate_chapter(0))
        await asyncio.sleep(0)
        assert await reading_controller.generate_chapter(0) is False

        event.set()
        assert await first is True
        assert fake_client.generate_chapter_content.await_count == 1

    @pytest.mark.asyncio
    async def test_generate_on_written_chapter_is_noop(self, reading_controller, fake_client):
        await reading_controller.generate_chapter(0)
        before = reading_controller.novel

        assert reading_controller.begin_generation(0) is False
        assert await reading_controller.generate_chapter(0) is False
        assert reading_controller.novel == before
        assert fake_client.generate_chapter_content.await_count == 1

    @pytest.mark.asyncio
    async def test_failure_clears_flag_and_sets_message(self, reading_controller, fake_client):
        from config.exceptions import LLMError
        from workflow.graph import CHAPTER_ERROR_MESSAGE

        fake_client.generate_chapter_content.side_effect = LLMError("timeout")

        assert await reading_controller.generate_chapter(1) is False

        chapter = reading_controller.novel.chapters[1]
        assert chapter.is_generating is False
        assert chapter.content is None
        assert reading_controller.error == CHAPTER_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self, reading_controller):
        reading_controller.store.set_error("قديم")
        await reading_controller.generate_chapter(0)
        assert reading_controller.error is None

    @pytest.mark.asyncio
    async def test_concurrent_generation_resolves_each_chapter(self, reading_controller, fake_client):
        async def write(premise, chapter, context):
            # Later chapters finish first
            await asyncio.sleep(0.01 * (3 - chapter.id))
            return f"نص {chapter.id}"

        fake_client.generate_chapter_content.side_effect = write

        results = await asyncio.gather(
            reading_controller.generate_chapter(0),
            reading_controller.generate_chapter(1),
            reading_controller.generate_chapter(2),
        )

        assert results == [True, True, True]
        assert [c.content for c in reading_controller.novel.chapters] == ["نص 1", "نص 2", "نص 3"]
        assert not any(c.is_generating for c in reading_controller.novel.chapters)

    @pytest.mark.asyncio
    async def test_invalid_index_raises(self, reading_controller):
        from config.exceptions import ChapterIndexError
        with pytest.raises(ChapterIndexError):
            await reading_controller.generate_chapter(9)


class TestTwist:
    @pytest.mark.asyncio
    async def test_twist_replaces_summary_and_content(self, reading_controller, fake_client):
        await reading_controller.generate_chapter(1)
        fake_client.generate_chapter_content.return_value = "نص بعد الحبكة"

        assert await reading_controller.twist(1) is True

        chapter = reading_controller.novel.chapters[1]
        assert chapter.summary == "ملخص جديد بحبكة مفاجئة"
        assert chapter.content == "نص بعد الحبكة"
        assert chapter.is_generating is False

    @pytest.mark.asyncio
    async def test_twist_allowed_on_stub(self, reading_controller):
        assert await reading_controller.twist(2) is True
        assert reading_controller.novel.chapters[2].content == "نص الفصل"

    @pytest.mark.asyncio
    async def test_twist_while_generating_is_noop(self, reading_controller, fake_client):
        reading_controller.begin_generation(0)
        assert await reading_controller.twist(0) is False
        fake_client.generate_twist.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_twist_failure_keeps_chapter(self, reading_controller, fake_client, sample_chapters):
        from config.exceptions import LLMError
        from workflow.graph import TWIST_ERROR_MESSAGE

        assert await reading_controller.generate_chapter(0) is True
        before = reading_controller.novel.chapters[0].content
        fake_client.generate_twist.side_effect = LLMError("down")

        assert await reading_controller.twist(0) is False

        chapter = reading_controller.novel.chapters[0]
        assert chapter.summary == sample_chapters[0].summary
        assert chapter.content == before == "نص الفصل"
        assert chapter.is_generating is False
        assert reading_controller.error == TWIST_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_prose_failure_after_twist_keeps_new_summary(self, reading_controller, fake_client):
        from config.exceptions import LLMError
        from workflow.graph import TWIST_ERROR_MESSAGE

        await reading_controller.generate_chapter(0)
        fake_client.generate_chapter_content.side_effect = LLMError("down")

        assert await reading_controller.twist(0) is False

        chapter = reading_controller.novel.chapters[0]
        assert chapter.summary == "ملخص جديد بحبكة مفاجئة"
        assert chapter.content == "نص الفصل"
        assert chapter.is_generating is False
        assert reading_controller.error == TWIST_ERROR_MESSAGE


class TestReadAloud:
    @pytest.mark.asyncio
    async def test_no_content_returns_none_without_call(self, reading_controller, fake_client):
        assert await reading_controller.synthesize_current_chapter() is None
        fake_client.synthesize_speech.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_synthesizes_current_chapter_content(self, reading_controller, fake_client):
        await reading_controller.generate_chapter(0)
        audio = await reading_controller.synthesize_current_chapter()
        assert audio == fake_client.synthesize_speech.return_value
        fake_client.synthesize_speech.assert_awaited_once_with("نص الفصل")

    @pytest.mark.asyncio
    async def test_failure_sets_audio_message(self, reading_controller, fake_client):
        from config.exceptions import SpeechSynthesisError
        from workflow.graph import AUDIO_ERROR_MESSAGE

        await reading_controller.generate_chapter(0)
        fake_client.synthesize_speech.side_effect = SpeechSynthesisError("No audio payload")

        assert await reading_controller.synthesize_current_chapter() is None
        assert reading_controller.error == AUDIO_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_missing_key_sets_audio_message(self, reading_controller, fake_client):
        from config.exceptions import InvalidConfigError
        from workflow.graph import AUDIO_ERROR_MESSAGE

        await reading_controller.generate_chapter(0)
        fake_client.synthesize_speech.side_effect = InvalidConfigError("GOOGLE_API_KEY is missing")

        assert await reading_controller.synthesize_current_chapter() is None
        assert reading_controller.error == AUDIO_ERROR_MESSAGE


class TestNavigationAndExport:
    def test_select_chapter_moves_cursor_only(self, reading_controller):
        before = reading_controller.novel.chapters
        reading_controller.select_chapter(2)
        assert reading_controller.novel.cursor == 2
        assert reading_controller.novel.chapters == before

    def test_select_invalid_chapter_raises(self, reading_controller):
        from config.exceptions import ChapterIndexError
        with pytest.raises(ChapterIndexError):
            reading_controller.select_chapter(5)

    def test_dismiss_error(self, reading_controller):
        reading_controller.store.set_error("خطأ")
        reading_controller.dismiss_error()
        assert reading_controller.error is None

    @pytest.mark.asyncio
    async def test_export_text_contains_generated_chapters_only(self, reading_controller):
        await reading_controller.generate_chapter(1)
        text = reading_controller.export_text()
        assert text.startswith("الفصل 2: ")
        assert "الفصل 1" not in text

    def test_is_current_generating(self, reading_controller):
        reading_controller.begin_generation(0)
        assert reading_controller.is_current_generating is True
        reading_controller.select_chapter(1)
        assert reading_controller.is_current_generating is False
