"""Workflow controller: the session state machine driven by user events."""

import logging
from typing import Optional

from agents.generation_client import GenerationClient
from config.exceptions import InvalidConfigError, LLMError, WorkflowStateError
from models.enums import AppState
from models.novel import Novel, Premise
from tools.text_utils import build_continuity_context, export_novel_text
from workflow.callbacks import WorkflowCallback
from workflow.conditions import can_generate, can_twist
from workflow.graph import (
    AUDIO_ERROR_MESSAGE,
    OUTLINE_ERROR_MESSAGE,
    build_chapter_graph,
    run_chapter_pipeline,
)
from workflow.state import NovelStore

logger = logging.getLogger(__name__)


class WorkflowController:
    """Owns the session's NovelStore and applies every transition to it.

    States: SETUP -> GENERATING_OUTLINE -> READING. Inside READING each
    chapter moves STUB -> GENERATING -> GENERATED, and back to GENERATING
    only through a twist. Chapter work is two-phase: a synchronous begin_*
    call marks the chapter pending, then the chapter pipeline resolves it.
    """

    def __init__(
        self,
        client: GenerationClient,
        store: Optional[NovelStore] = None,
        callback: Optional[WorkflowCallback] = None,
    ):
        self.client = client
        self.store = store or NovelStore()
        self.callback = callback
        self._app = build_chapter_graph()

    # ── outline ───────────────────────────────────────────────────────

    async def start(self, premise: Premise) -> bool:
        """Generate the outline for ``premise`` and enter READING.

        On failure the session returns to SETUP with no chapters kept.
        """
        if self.store.app_state == AppState.GENERATING_OUTLINE:
            raise WorkflowStateError("Outline generation already in progress")
        if self.store.app_state != AppState.SETUP:
            raise WorkflowStateError(f"Cannot start a novel from {self.store.app_state.name}")
        self.store.app_state = AppState.GENERATING_OUTLINE
        self.store.clear_error()
        logger.info("Starting novel '%s' (%s / %s)", premise.title, premise.genre.name, premise.tone.name)

        try:
            chapters = await self.client.generate_outline(premise)
        except LLMError as e:
            logger.error("Outline generation failed: %s", e)
            return self._outline_failed()
        except Exception:
            logger.exception("Outline generation failed unexpectedly")
            return self._outline_failed()

        novel = Novel(premise=premise, chapters=tuple(chapters), cursor=0)
        self.store.replace_novel(novel)
        self.store.app_state = AppState.READING
        if self.callback is not None:
            self.callback.on_outline_ready(novel)
        return True

    def _outline_failed(self) -> bool:
        self.store.app_state = AppState.SETUP
        self.store.set_error(OUTLINE_ERROR_MESSAGE)
        if self.callback is not None:
            self.callback.on_error("outline", OUTLINE_ERROR_MESSAGE)
        return False

    # ── chapter work: mark pending ────────────────────────────────────

    def begin_generation(self, index: int) -> bool:
        """Mark chapter ``index`` as generating; False if guarded."""
        return self._begin(index, can_generate)

    def begin_twist(self, index: int) -> bool:
        """Mark chapter ``index`` as generating for a twist; False if guarded."""
        return self._begin(index, can_twist)

    def _begin(self, index: int, guard) -> bool:
        chapter = self.store.chapter(index)
        if not guard(chapter):
            logger.debug("Chapter %d busy or done, ignoring request", chapter.id)
            return False
        updated = self.store.update_chapter(index, is_generating=True)
        if self.callback is not None:
            self.callback.on_chapter_update(index, updated)
        return True

    # ── chapter work: resolve ─────────────────────────────────────────

    async def generate_chapter(self, index: int) -> bool:
        """Generate prose for chapter ``index``.

        Returns True when content was stored, False when guarded or failed.
        """
        if not self.begin_generation(index):
            return False
        return await self.resolve(index, "generate")

    async def twist(self, index: int) -> bool:
        """Rewrite chapter ``index``'s summary with a twist, then regenerate its prose."""
        if not self.begin_twist(index):
            return False
        return await self.resolve(index, "twist")

    async def resolve(self, index: int, mode: str) -> bool:
        """Run the chapter pipeline for a chapter already marked pending."""
        novel = self.store.require_novel()
        context = build_continuity_context(novel.chapters, index)

        try:
            final_state = await run_chapter_pipeline(
                self._app, index, mode, context, self.store, self.client, self.callback,
            )
        except Exception:
            # Never leave the chapter stuck in GENERATING
            logger.exception("Chapter pipeline crashed (%s, index %d)", mode, index)
            self.store.update_chapter(index, is_generating=False)
            raise

        return final_state.get("last_node") == "save_chapter"

    # ── read aloud ────────────────────────────────────────────────────

    async def synthesize_current_chapter(self) -> Optional[bytes]:
        """Return speech audio for the chapter under the cursor.

        Returns None when the chapter has no content yet or synthesis fails;
        a failure also surfaces the audio error message.
        """
        chapter = self.store.require_novel().current_chapter
        if chapter is None or not chapter.content:
            return None

        try:
            audio = await self.client.synthesize_speech(chapter.content)
        except (LLMError, InvalidConfigError) as e:
            logger.error("Speech synthesis failed for chapter %d: %s", chapter.id, e)
            self.store.set_error(AUDIO_ERROR_MESSAGE)
            if self.callback is not None:
                self.callback.on_error("speech", AUDIO_ERROR_MESSAGE)
            return None

        self.store.clear_error()
        return audio

    # ── navigation & presentation helpers ─────────────────────────────

    def select_chapter(self, index: int) -> None:
        """Move the reading cursor; no effect on any chapter."""
        self.store.set_cursor(index)

    def dismiss_error(self) -> None:
        self.store.clear_error()

    def export_text(self) -> str:
        return export_novel_text(self.store.require_novel())

    @property
    def novel(self) -> Optional[Novel]:
        return self.store.novel

    @property
    def error(self) -> Optional[str]:
        return self.store.error

    @property
    def is_current_generating(self) -> bool:
        return self.store.is_current_generating
