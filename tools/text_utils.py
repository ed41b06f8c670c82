"""Text utilities: continuity context, export formatting, word counts."""

import re
from typing import Iterable

from models.chapter import Chapter
from models.novel import Novel

EXPORT_SEPARATOR = "\n\n-------------------\n\n"

_FILENAME_UNSAFE_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


def build_continuity_context(chapters: Iterable[Chapter], index: int) -> str:
    """Condense the summaries of every chapter before ``index``.

    Summaries are always available, so chapters are included whether or not
    their prose has been generated. Returns an empty string for the first
    chapter.
    """
    lines = [
        f"فصل {chapter.id}: {chapter.summary}"
        for position, chapter in enumerate(chapters)
        if position < index
    ]
    return "\n".join(lines)


def export_novel_text(novel: Novel) -> str:
    """Concatenate generated chapters in ascending id order.

    Chapters without content are omitted entirely.
    """
    blocks = [
        f"الفصل {chapter.id}: {chapter.title}\n\n{chapter.content}"
        for chapter in sorted(novel.chapters, key=lambda c: c.id)
        if chapter.content
    ]
    return EXPORT_SEPARATOR.join(blocks)


def export_filename(title: str) -> str:
    """Return ``<title>.txt`` with path-hostile characters replaced."""
    stem = _FILENAME_UNSAFE_RE.sub("_", title or "").strip(" ._")
    return f"{stem or 'novel'}.txt"


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    if not text:
        return 0
    return len(text.split())


def shorten(text: str, limit: int = 60) -> str:
    """Collapse whitespace and truncate for one-line previews."""
    flat = " ".join((text or "").split())
    if len(flat) <= limit:
        return flat
    return flat[:limit].rstrip() + "..."
