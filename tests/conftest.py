"""Shared pytest fixtures for the rawi test suite."""

import asyncio

import pytest
from unittest.mock import MagicMock, AsyncMock


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Return a Settings instance with all paths pointing to tmp_path."""
    from config.settings import Settings
    return Settings(
        _env_file=None,
        export_dir=tmp_path / "exports",
        log_dir=tmp_path / "logs",
        google_api_key="test-key",
        outline_min_chapters=5,
        outline_max_chapters=10,
    )


# ---------------------------------------------------------------------------
# LLM Client mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_llm(settings):
    """Return a MagicMock replacing AgentSDKClient."""
    llm = MagicMock()
    llm.chat = AsyncMock(return_value="كان يا ما كان في قديم الزمان. " * 20)
    llm.chat_json = AsyncMock(return_value={})
    llm.get_usage_summary.return_value = {"total_calls": 1}
    llm.settings = settings
    return llm


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_premise():
    from models.enums import Genre, Tone
    from models.novel import Premise
    return Premise(
        title="مدينة النحاس",
        genre=Genre.FANTASY,
        tone=Tone.MYSTERIOUS,
        protagonist="سلمى، صانعة خرائط شابة",
        setting="بغداد في القرن العاشر",
        plot_summary="تبحث سلمى عن مدينة أسطورية اختفت من كل الخرائط.",
        target_audience="الشباب",
    )


@pytest.fixture
def sample_chapters():
    from models.chapter import Chapter
    return [
        Chapter(id=1, title="الخريطة الممزقة", summary="تجد سلمى خريطة قديمة في سوق الوراقين."),
        Chapter(id=2, title="القافلة", summary="تنضم سلمى إلى قافلة متجهة إلى الصحراء."),
        Chapter(id=3, title="الأبواب النحاسية", summary="تصل القافلة إلى أسوار المدينة المفقودة."),
    ]


@pytest.fixture
def sample_novel(sample_premise, sample_chapters):
    from models.novel import Novel
    return Novel(premise=sample_premise, chapters=tuple(sample_chapters), cursor=0)


# ---------------------------------------------------------------------------
# Generation client fake
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_client(sample_premise, sample_chapters):
    """Return an AsyncMock standing in for AgentGenerationClient."""
    client = AsyncMock()
    client.suggest_premise.return_value = sample_premise
    client.generate_outline.return_value = list(sample_chapters)
    client.generate_chapter_content.return_value = "نص الفصل"
    client.generate_twist.return_value = "ملخص جديد بحبكة مفاجئة"
    client.synthesize_speech.return_value = b"\x00\x01" * 100
    client.get_usage_summary = MagicMock(return_value={"text_calls": 0, "speech_calls": 0})
    return client


@pytest.fixture
def reading_controller(fake_client, sample_novel):
    """Return a WorkflowController already in READING with the sample novel."""
    from models.enums import AppState
    from workflow.controller import WorkflowController
    from workflow.state import NovelStore

    store = NovelStore()
    store.replace_novel(sample_novel)
    store.app_state = AppState.READING
    return WorkflowController(fake_client, store=store)


@pytest.fixture
def make_blocking():
    """Factory: (event, coroutine function) that waits on the event, then returns or raises ``result``."""

    def _factory(result):
        event = asyncio.Event()

        async def _wait(*args, **kwargs):
            await event.wait()
            if isinstance(result, BaseException):
                raise result
            return result

        return event, _wait

    return _factory
