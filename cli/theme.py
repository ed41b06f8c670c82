"""Unified Rich theme and reusable UI helper functions for the CLI."""

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from models.chapter import Chapter
from models.enums import ChapterStatus
from models.novel import Novel, Premise
from tools.text_utils import count_words, shorten

RAWI_THEME = Theme({
    "app.title": "bold",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "blue",
    "muted": "dim",
    "accent": "cyan",
    "genre": "bold",
    "stat.label": "dim",
    "stat.value": "bold",
    "chapter.num": "blue",
    "chapter.current": "bold cyan",
})

_STATUS_ICONS = {
    ChapterStatus.STUB: ("○", "muted"),
    ChapterStatus.GENERATING: ("…", "warning"),
    ChapterStatus.GENERATED: ("●", "success"),
}


def get_console() -> Console:
    """Return a Console instance with the rawi theme applied."""
    return Console(theme=RAWI_THEME)


def app_header(title: str = "rawi") -> Rule:
    """Return a Rule element for the application header banner."""
    return Rule(title=f"[bold]{title}[/]", style="dim")


def command_panel(title: str, fields: dict[str, str]) -> Panel:
    """Return a Panel displaying command parameters.

    Args:
        title: Panel title (e.g. "رواية جديدة").
        fields: Ordered dict of label -> value pairs.
    """
    lines = []
    for label, value in fields.items():
        lines.append(f"  [stat.label]{label}:[/] [stat.value]{value}[/]")
    body = "\n".join(lines)
    return Panel(body, title=f"[bold]{title}[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def premise_panel(premise: Premise) -> Panel:
    """Return a Panel summarising the story premise."""
    return command_panel(premise.title, {
        "النوع": premise.genre.value,
        "الأسلوب": premise.tone.value,
        "البطل": premise.protagonist,
        "المكان": premise.setting,
        "الحبكة": premise.plot_summary,
        "الجمهور": premise.target_audience,
    })


def chapter_table(novel: Novel) -> Table:
    """Build the table of contents, marking each chapter's status and the cursor."""
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("#", style="chapter.num", justify="right")
    table.add_column("", justify="center")
    table.add_column("العنوان")
    table.add_column("الملخص", style="muted")
    table.add_column("كلمات", justify="right")

    for position, chapter in enumerate(novel.chapters):
        icon, style = _STATUS_ICONS[chapter.status]
        title_style = "chapter.current" if position == novel.cursor else ""
        words = str(count_words(chapter.content)) if chapter.content else "-"
        table.add_row(
            str(chapter.id),
            f"[{style}]{icon}[/]",
            Text(chapter.title, style=title_style),
            shorten(chapter.summary),
            words,
        )
    return table


def chapter_panel(chapter: Chapter) -> Panel:
    """Return a Panel with the chapter's prose, or its summary while there is none."""
    if chapter.is_generating:
        body = f"[muted]{chapter.summary}[/]\n\n[warning]جاري الكتابة...[/]"
    elif chapter.content:
        body = chapter.content
    else:
        body = f"[muted]{chapter.summary}[/]\n\n[info]/write[/] [muted]لكتابة هذا الفصل[/]"

    return Panel(
        body,
        title=f"[bold]الفصل {chapter.id}: {chapter.title}[/]",
        box=box.ROUNDED,
        border_style="dim",
        padding=(1, 2),
    )


def success_panel(title: str, body: str) -> Panel:
    """Return a green-bordered Panel for success results."""
    return Panel(body, title=f"[success]{title}[/]", box=box.ROUNDED, border_style="green", padding=(0, 2))


def error_panel(message: Optional[str]) -> Optional[Panel]:
    """Return a red-bordered Panel for the session error, or None when clear."""
    if not message:
        return None
    return Panel(
        f"{message}\n[muted]/dismiss للإخفاء[/]",
        title="[error]خطأ[/]",
        box=box.ROUNDED,
        border_style="red",
        padding=(0, 2),
    )
