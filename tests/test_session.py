"""Tests for the interactive reader session's slash commands."""

import asyncio
import io

import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def player():
    player = MagicMock()
    player.is_playing = False
    player.play = AsyncMock()
    player.stop = AsyncMock()
    return player


@pytest.fixture
def session(reading_controller, player, settings):
    from rich.console import Console
    from cli.session import ReaderSession
    from cli.theme import RAWI_THEME
    console = Console(file=io.StringIO(), width=120, theme=RAWI_THEME)
    return ReaderSession(reading_controller, player, settings=settings, console=console)


async def _drain(session):
    if session._tasks:
        await asyncio.gather(*list(session._tasks))


class TestReaderSession:
    @pytest.mark.asyncio
    async def test_quit_returns_none(self, session):
        assert await session.handle_command("/quit") is None

    @pytest.mark.asyncio
    async def test_help_lists_commands(self, session):
        text = await session.handle_command("/help")
        for command in ("/write", "/twist", "/play", "/export"):
            assert command in text

    @pytest.mark.asyncio
    async def test_unknown_command(self, session):
        text = await session.handle_command("/publish")
        assert "/publish" in text

    @pytest.mark.asyncio
    async def test_read_uses_one_based_numbers(self, session, reading_controller):
        await session.handle_command("/read 3")
        assert reading_controller.novel.cursor == 2

    @pytest.mark.asyncio
    async def test_read_invalid_number(self, session, reading_controller):
        text = await session.handle_command("/read 9")
        assert "9" in text
        assert reading_controller.novel.cursor == 0
        text = await session.handle_command("/read abc")
        assert "abc" in text

    @pytest.mark.asyncio
    async def test_changing_chapter_stops_audio(self, session, player):
        player.is_playing = True
        await session.handle_command("/next")
        player.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_prev_at_first_chapter_stays(self, session, reading_controller):
        await session.handle_command("/prev")
        assert reading_controller.novel.cursor == 0

    @pytest.mark.asyncio
    async def test_write_runs_in_background(self, session, reading_controller):
        await session.handle_command("/write 2")
        assert reading_controller.novel.chapters[1].is_generating is True

        await _drain(session)

        assert reading_controller.novel.chapters[1].content == "نص الفصل"
        assert reading_controller.novel.chapters[1].is_generating is False

    @pytest.mark.asyncio
    async def test_write_defaults_to_current_chapter(self, session, reading_controller):
        reading_controller.select_chapter(1)
        await session.handle_command("/write")
        await _drain(session)
        assert reading_controller.novel.chapters[1].content is not None
        assert reading_controller.novel.chapters[0].content is None

    @pytest.mark.asyncio
    async def test_write_on_written_chapter_is_refused(self, session, reading_controller, fake_client):
        await reading_controller.generate_chapter(0)
        text = await session.handle_command("/write 1")
        assert "/twist" in text
        assert fake_client.generate_chapter_content.await_count == 1

    @pytest.mark.asyncio
    async def test_twist_runs_in_background(self, session, reading_controller):
        await session.handle_command("/twist 1")
        await _drain(session)
        assert reading_controller.novel.chapters[0].summary == "ملخص جديد بحبكة مفاجئة"

    @pytest.mark.asyncio
    async def test_play_without_content_warns(self, session, player):
        text = await session.handle_command("/play")
        assert text
        player.play.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_play_synthesizes_and_plays(self, session, reading_controller, player, fake_client):
        await reading_controller.generate_chapter(0)
        await session.handle_command("/play")
        player.mark_loading.assert_called_once()
        player.play.assert_awaited_once_with(fake_client.synthesize_speech.return_value)

    @pytest.mark.asyncio
    async def test_play_toggles_off_when_playing(self, session, player):
        player.is_playing = True
        await session.handle_command("/play")
        player.stop.assert_awaited_once()
        player.play.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_play_failure_goes_idle(self, session, reading_controller, player, fake_client):
        from config.exceptions import SpeechSynthesisError
        from workflow.graph import AUDIO_ERROR_MESSAGE

        await reading_controller.generate_chapter(0)
        fake_client.synthesize_speech.side_effect = SpeechSynthesisError("no audio")

        await session.handle_command("/play")

        player.mark_idle.assert_called_once()
        player.play.assert_not_awaited()
        assert reading_controller.error == AUDIO_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_player_launch_failure_sets_audio_message(self, session, reading_controller, player):
        from config.exceptions import AudioPlaybackError
        from workflow.graph import AUDIO_ERROR_MESSAGE

        await reading_controller.generate_chapter(0)
        player.play.side_effect = AudioPlaybackError("Cannot start audio player")

        await session.handle_command("/play")

        assert reading_controller.error == AUDIO_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_export_to_default_dir(self, session, reading_controller, settings):
        await reading_controller.generate_chapter(0)
        await session.handle_command("/export")

        path = settings.export_dir / "مدينة النحاس.txt"
        assert path.read_text(encoding="utf-8") == reading_controller.export_text()

    @pytest.mark.asyncio
    async def test_export_to_given_path(self, session, reading_controller, tmp_path):
        await reading_controller.generate_chapter(0)
        target = tmp_path / "out" / "novel.txt"
        await session.handle_command(f"/export {target}")
        assert target.exists()

    @pytest.mark.asyncio
    async def test_export_write_failure_keeps_session(self, session, reading_controller, tmp_path):
        await reading_controller.generate_chapter(0)
        target = tmp_path / "outdir"
        target.mkdir()

        result = await session.handle_command(f"/export {target}")

        assert result.startswith("[error]")
        assert reading_controller.novel.chapters[0].content == "نص الفصل"
        assert await session.handle_command("/list") == ""

    @pytest.mark.asyncio
    async def test_dismiss_clears_error(self, session, reading_controller):
        reading_controller.store.set_error("خطأ")
        await session.handle_command("/dismiss")
        assert reading_controller.error is None

    @pytest.mark.asyncio
    async def test_close_stops_audio_and_cancels_work(self, session, reading_controller, fake_client, player, make_blocking):
        event, wait = make_blocking("نص")
        fake_client.generate_chapter_content.side_effect = wait
        await session.handle_command("/write 1")

        await session.close()

        player.stop.assert_awaited()
        assert not session._tasks
