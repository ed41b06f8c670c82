"""Workflow progress callbacks for monitoring and presentation updates."""

import logging
from typing import Protocol, runtime_checkable

from models.chapter import Chapter
from models.novel import Novel

logger = logging.getLogger(__name__)


@runtime_checkable
class WorkflowCallback(Protocol):
    """Protocol for workflow progress callbacks.

    Implement this protocol to follow state transitions from a front end.
    """

    def on_outline_ready(self, novel: Novel) -> None:
        """Called once the outline has replaced the session novel."""
        ...

    def on_chapter_update(self, index: int, chapter: Chapter) -> None:
        """Called after any patch to a chapter (flag, summary or content)."""
        ...

    def on_error(self, operation: str, message: str) -> None:
        """Called when an operation fails and a message is surfaced."""
        ...


class LoggingCallback:
    """Lightweight callback that logs progress to the standard logger."""

    def on_outline_ready(self, novel: Novel) -> None:
        logger.info("Outline ready: '%s', %d chapters", novel.premise.title, len(novel.chapters))

    def on_chapter_update(self, index: int, chapter: Chapter) -> None:
        logger.debug("Chapter %d -> %s", chapter.id, chapter.status.value)

    def on_error(self, operation: str, message: str) -> None:
        logger.error("Workflow error in '%s': %s", operation, message)
