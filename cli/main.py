"""CLI entry point — Rawi, the Arabic AI novel studio.

Usage:
  rawi                 fill in the story form, then read and write chapters
  rawi idea            suggest a story premise
  rawi new ...         skip the form and start from command-line options
  rawi --help          list all commands
"""

import asyncio
import json
import logging
import os
import sys
from typing import Optional

# Ensure UTF-8 output on Windows so Arabic text renders through Rich
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")

import click
import questionary

from cli.theme import app_header, command_panel, get_console, premise_panel
from config.exceptions import LLMError
from config.logging_config import setup_logging
from config.settings import Settings
from models.enums import Genre, Tone
from models.novel import Premise

console = get_console()
logger = logging.getLogger(__name__)

# Form fields in display order: (premise key, question)
_TEXT_FIELDS = [
    ("title", "عنوان الرواية:"),
    ("protagonist", "البطل:"),
    ("setting", "المكان والزمان:"),
    ("plot_summary", "ملخص الحبكة:"),
    ("target_audience", "الجمهور المستهدف:"),
]


def _init_logging(verbose: bool):
    """Configure logging based on verbosity.

    The interactive session owns the terminal, so console logging is only
    switched on with --verbose; everything still goes to the log files.
    """
    level = logging.DEBUG if verbose else logging.INFO
    settings = Settings()
    setup_logging(level=level, log_dir=settings.log_dir, console_enabled=verbose)


def _required(value: str):
    return bool(value.strip()) or "هذا الحقل مطلوب"


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, verbose):
    """Rawi — AI-assisted Arabic novel writing.

    \b
    Run `rawi` with no command to fill in the story form:
      the outline is generated, then chapters are written on demand.

    \b
    Or use a subcommand:
      rawi idea
      rawi new -t "..." -g خيال -o جاد ...
    """
    _init_logging(verbose)
    if ctx.invoked_subcommand is None:
        settings = Settings()
        console.print(app_header())
        console.print()

        defaults: dict = {}
        while True:
            premise = _collect_premise(settings, defaults)
            if premise is None:
                console.print("[muted]تم الإلغاء[/]")
                return
            if _run_reader(settings, premise):
                return
            # Outline failed: back to the form with the previous answers
            defaults = _form_defaults(premise)


# ---------------------------------------------------------------------------
# setup form
# ---------------------------------------------------------------------------

def _form_defaults(premise: Premise) -> dict:
    defaults = {key: getattr(premise, key) for key, _ in _TEXT_FIELDS}
    defaults["genre"] = premise.genre.value
    defaults["tone"] = premise.tone.value
    return defaults


def _suggest(settings: Settings) -> Optional[Premise]:
    from agents.generation_client import AgentGenerationClient

    client = AgentGenerationClient(settings=settings)
    try:
        with console.status("جاري اقتراح فكرة..."):
            return asyncio.run(client.suggest_premise())
    except LLMError as e:
        logger.error("Premise suggestion failed: %s", e)
        console.print("[warning]تعذر اقتراح فكرة، يمكنك كتابة فكرتك بنفسك[/]")
        return None


def _collect_premise(settings: Settings, defaults: dict) -> Optional[Premise]:
    """Ask for the premise field by field. Returns None if the user cancels."""
    if not defaults:
        wants_idea = questionary.confirm("هل تريد اقتراح فكرة تلقائياً؟", default=False).ask()
        if wants_idea is None:
            return None
        if wants_idea:
            suggested = _suggest(settings)
            if suggested is not None:
                console.print(premise_panel(suggested))
                defaults = _form_defaults(suggested)

    answers: dict = {}
    for key, question in _TEXT_FIELDS:
        value = questionary.text(question, default=defaults.get(key, ""), validate=_required).ask()
        if value is None:
            return None
        answers[key] = value.strip()

    genre = questionary.select(
        "النوع الأدبي:",
        choices=Genre.labels(),
        default=defaults.get("genre") or Genre.FANTASY.value,
    ).ask()
    if genre is None:
        return None
    tone = questionary.select(
        "أسلوب السرد:",
        choices=Tone.labels(),
        default=defaults.get("tone") or Tone.SERIOUS.value,
    ).ask()
    if tone is None:
        return None

    answers["genre"] = genre
    answers["tone"] = tone
    return Premise.from_dict(answers)


# ---------------------------------------------------------------------------
# reader
# ---------------------------------------------------------------------------

async def _reader_main(settings: Settings, premise: Premise) -> bool:
    from agents.generation_client import AgentGenerationClient
    from cli.session import ConsoleCallback, ReaderSession
    from tools.audio_player import AudioPlayer
    from workflow.controller import WorkflowController

    client = AgentGenerationClient(settings=settings)
    controller = WorkflowController(client, callback=ConsoleCallback(console))

    with console.status("جاري إنشاء مخطط الرواية..."):
        ok = await controller.start(premise)
    if not ok:
        return False

    async with AudioPlayer(settings.audio_player_command, settings.audio_sample_rate) as player:
        session = ReaderSession(controller, player, settings=settings, console=console)
        await session.run()

    _print_usage_summary(client.get_usage_summary())
    return True


def _run_reader(settings: Settings, premise: Premise) -> bool:
    """Generate the outline and open the reader. False if the outline failed."""
    try:
        return asyncio.run(_reader_main(settings, premise))
    except KeyboardInterrupt:
        console.print("\n[warning]تمت المقاطعة[/]")
        sys.exit(130)


# ---------------------------------------------------------------------------
# idea command
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the premise as JSON")
def idea(as_json):
    """Suggest a random story premise.

    Examples:
      rawi idea
      rawi idea --json > premise.json
    """
    from agents.generation_client import AgentGenerationClient

    settings = Settings()
    client = AgentGenerationClient(settings=settings)
    try:
        premise = asyncio.run(client.suggest_premise())
    except LLMError as e:
        console.print(f"[error]تعذر اقتراح فكرة: {e}[/]")
        logger.exception("Premise suggestion failed")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(premise.to_dict(), ensure_ascii=False, indent=2))
    else:
        console.print(premise_panel(premise))


# ---------------------------------------------------------------------------
# new command
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--title", "-t", required=True, help="Novel title")
@click.option("--genre", "-g", required=True,
              help="Genre: Arabic label or name (" + ", ".join(g.name.lower() for g in Genre) + ")")
@click.option("--tone", "-o", required=True,
              help="Tone: Arabic label or name (" + ", ".join(t.name.lower() for t in Tone) + ")")
@click.option("--protagonist", "-p", required=True, help="Main character")
@click.option("--setting", "-s", required=True, help="Where and when the story happens")
@click.option("--plot", required=True, help="Plot summary")
@click.option("--audience", "-a", default="عام", show_default=True, help="Target audience")
def new(title, genre, tone, protagonist, setting, plot, audience):
    """Start a novel directly from options and open the reader.

    Example:
      rawi new -t "مدينة النحاس" -g fantasy -o mysterious -p "سلمى" -s "بغداد القديمة" --plot "..."
    """
    try:
        premise = Premise.from_dict({
            "title": title,
            "genre": genre,
            "tone": tone,
            "protagonist": protagonist,
            "setting": setting,
            "plot_summary": plot,
            "target_audience": audience,
        })
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    settings = Settings()
    console.print(app_header())
    console.print()
    console.print(command_panel("رواية جديدة", {
        "العنوان": premise.title,
        "النوع": premise.genre.value,
        "الأسلوب": premise.tone.value,
    }))
    console.print()

    if not _run_reader(settings, premise):
        sys.exit(1)


def _print_usage_summary(usage: dict) -> None:
    """Print provider call counts for the session."""
    if not usage:
        return
    console.print(
        f"\n[muted]طلبات النص: {usage.get('text_calls', 0)} | "
        f"طلبات الصوت: {usage.get('speech_calls', 0)}[/]"
    )


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
