"""Guards and conditional routing for the chapter workflow."""

from models.chapter import Chapter
from workflow.state import ChapterWorkflowState


def can_generate(chapter: Chapter) -> bool:
    """Generation is a no-op for chapters that have content or are in flight."""
    return not chapter.content and not chapter.is_generating


def can_twist(chapter: Chapter) -> bool:
    """A twist is a no-op only while the chapter is in flight."""
    return not chapter.is_generating


def route_entry(state: ChapterWorkflowState) -> str:
    """Twists rewrite the summary first; plain generation goes straight to prose."""
    if state.get("mode") == "twist":
        return "rewrite_summary"
    return "write_content"


def route_after_rewrite(state: ChapterWorkflowState) -> str:
    if state.get("error"):
        return "handle_error"
    return "write_content"


def route_after_write(state: ChapterWorkflowState) -> str:
    if state.get("error"):
        return "handle_error"
    return "save_chapter"
