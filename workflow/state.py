"""Session state: the novel store and the chapter-pipeline graph state."""

import logging
from dataclasses import replace
from typing import Optional, TypedDict

from config.exceptions import ChapterIndexError, WorkflowStateError
from models.chapter import Chapter
from models.enums import AppState
from models.novel import Novel

logger = logging.getLogger(__name__)


class ChapterWorkflowState(TypedDict, total=False):
    """State carried through one run of the chapter pipeline.

    Fields are grouped logically:
    - Target: index, mode ("generate" or "twist")
    - Inputs: summary, context_prompt
    - Outputs: content
    - Control: error, last_node
    """

    # Target
    index: int
    mode: str

    # Inputs
    summary: str
    context_prompt: str

    # Outputs
    content: str

    # Control flow
    error: str
    last_node: str


class NovelStore:
    """Holds the one Novel of a session plus the last user-visible error.

    Every mutation builds a new immutable Novel and swaps it in with a single
    assignment.
    """

    def __init__(self):
        self.app_state = AppState.SETUP
        self.error: Optional[str] = None
        self._novel: Optional[Novel] = None

    @property
    def novel(self) -> Optional[Novel]:
        return self._novel

    def require_novel(self) -> Novel:
        if self._novel is None:
            raise WorkflowStateError("No outline yet", {"app_state": self.app_state.value})
        return self._novel

    def chapter(self, index: int) -> Chapter:
        novel = self.require_novel()
        self._check_index(novel, index)
        return novel.chapters[index]

    @property
    def is_current_generating(self) -> bool:
        if self._novel is None or self._novel.current_chapter is None:
            return False
        return self._novel.current_chapter.is_generating

    def replace_novel(self, novel: Novel) -> None:
        self._novel = novel
        logger.debug("Novel replaced: %d chapters", len(novel.chapters))

    def update_chapter(
        self,
        index: int,
        *,
        summary: Optional[str] = None,
        content: Optional[str] = None,
        is_generating: Optional[bool] = None,
    ) -> Chapter:
        """Patch one chapter; ``None`` leaves a field unchanged."""
        novel = self.require_novel()
        self._check_index(novel, index)

        changes = {}
        if summary is not None:
            changes["summary"] = summary
        if content is not None:
            changes["content"] = content
        if is_generating is not None:
            changes["is_generating"] = is_generating

        chapter = replace(novel.chapters[index], **changes)
        self._novel = novel.with_chapter(index, chapter)
        return chapter

    def set_cursor(self, index: int) -> None:
        novel = self.require_novel()
        self._check_index(novel, index)
        self._novel = novel.with_cursor(index)

    def set_error(self, message: str) -> None:
        self.error = message

    def clear_error(self) -> None:
        self.error = None

    @staticmethod
    def _check_index(novel: Novel, index: int) -> None:
        if not 0 <= index < len(novel.chapters):
            raise ChapterIndexError(index, len(novel.chapters))
