"""Rawi — interactive reader session.

The reader browses the outline, asks for chapters to be written or twisted,
listens to them and exports the finished text. Chapter work runs as
background tasks so several chapters can be in flight while the prompt
stays responsive.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from cli.theme import (
    app_header,
    chapter_panel,
    chapter_table,
    error_panel,
    get_console,
    premise_panel,
    success_panel,
)
from config.exceptions import AudioPlaybackError, ChapterIndexError
from config.settings import Settings
from models.chapter import Chapter
from models.novel import Novel
from tools.audio_player import AudioPlayer
from tools.text_utils import export_filename
from workflow.controller import WorkflowController
from workflow.graph import AUDIO_ERROR_MESSAGE

logger = logging.getLogger(__name__)


class ConsoleCallback:
    """Prints workflow progress that happens outside the prompt loop."""

    def __init__(self, console: Console):
        self.console = console

    def on_outline_ready(self, novel: Novel) -> None:
        self.console.print(f"[success]✓[/] المخطط جاهز: {len(novel.chapters)} فصول")

    def on_chapter_update(self, index: int, chapter: Chapter) -> None:
        if chapter.is_generating:
            self.console.print(f"[muted]… الفصل {chapter.id} قيد الكتابة[/]")
        elif chapter.content:
            self.console.print(f"[success]✓[/] الفصل {chapter.id} جاهز")

    def on_error(self, operation: str, message: str) -> None:
        self.console.print(error_panel(message))


class ReaderSession:
    """Slash-command loop over a WorkflowController in READING state."""

    def __init__(
        self,
        controller: WorkflowController,
        player: AudioPlayer,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
    ):
        self.controller = controller
        self.player = player
        self.settings = settings or Settings()
        self.console = console or get_console()
        self._tasks: set[asyncio.Task] = set()

    # ── helpers ───────────────────────────────────────────────────────

    def _parse_number(self, arg: str) -> Optional[int]:
        """Turn a 1-based chapter number into an index; None when absent."""
        arg = arg.strip()
        if not arg:
            return None
        return int(arg) - 1

    def _target_index(self, arg: str) -> int:
        index = self._parse_number(arg)
        if index is None:
            return self.controller.novel.cursor
        # Validate before touching anything
        self.controller.store.chapter(index)
        return index

    def _spawn(self, index: int, mode: str) -> None:
        task = asyncio.create_task(self.controller.resolve(index, mode))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Chapter task failed: %s", exc, exc_info=exc)
            self.console.print(f"[error]تعذر إكمال المهمة: {exc}[/]")

    async def _stop_audio(self) -> None:
        if self.player.is_playing:
            await self.player.stop()

    # ── slash commands ────────────────────────────────────────────────

    async def handle_command(self, cmd: str) -> Optional[str]:
        """Handle one slash command. Returns display text, "" for none, or None to quit."""
        parts = cmd.strip().split(maxsplit=1)
        command = parts[0].lower()
        arg = parts[1] if len(parts) > 1 else ""

        if command in ("/quit", "/exit"):
            return None

        try:
            if command == "/help":
                return self._cmd_help()
            if command == "/list":
                self.console.print(chapter_table(self.controller.novel))
                return ""
            if command == "/read":
                return await self._cmd_read(arg)
            if command == "/next":
                return await self._cmd_step(1)
            if command == "/prev":
                return await self._cmd_step(-1)
            if command == "/write":
                return self._cmd_write(arg)
            if command == "/twist":
                return self._cmd_twist(arg)
            if command == "/play":
                return await self._cmd_play()
            if command == "/stop":
                await self.player.stop()
                return "[muted]تم إيقاف الصوت[/]"
            if command == "/export":
                return self._cmd_export(arg)
            if command == "/dismiss":
                self.controller.dismiss_error()
                return ""
        except (ChapterIndexError, ValueError):
            return f"[error]رقم فصل غير صالح: {arg or '-'}[/]"

        return f"[error]أمر غير معروف: {command}[/]\nاكتب /help لعرض الأوامر"

    def _cmd_help(self) -> str:
        lines = [
            "[bold]الأوامر[/]",
            "",
            "  [accent]/list[/]            فهرس الفصول",
            "  [accent]/read N[/]          قراءة الفصل N",
            "  [accent]/next[/] [accent]/prev[/]      الفصل التالي أو السابق",
            "  [accent]/write [N][/]       كتابة الفصل (الحالي افتراضياً)",
            "  [accent]/twist [N][/]       إضافة حبكة مفاجئة للفصل",
            "  [accent]/play[/] [accent]/stop[/]      الاستماع إلى الفصل الحالي",
            "  [accent]/export [path][/]   تصدير الرواية إلى ملف نصي",
            "  [accent]/dismiss[/]         إخفاء رسالة الخطأ",
            "  [accent]/quit[/]            خروج",
        ]
        return "\n".join(lines)

    async def _cmd_read(self, arg: str) -> str:
        index = self._parse_number(arg)
        if index is None:
            index = self.controller.novel.cursor
        await self._select(index)
        return ""

    async def _cmd_step(self, delta: int) -> str:
        novel = self.controller.novel
        index = novel.cursor + delta
        if not 0 <= index < len(novel.chapters):
            return "[muted]لا يوجد فصل آخر في هذا الاتجاه[/]"
        await self._select(index)
        return ""

    async def _select(self, index: int) -> None:
        self.controller.store.chapter(index)
        if index != self.controller.novel.cursor:
            await self._stop_audio()
        self.controller.select_chapter(index)
        self.console.print(chapter_panel(self.controller.novel.current_chapter))

    def _cmd_write(self, arg: str) -> str:
        index = self._target_index(arg)
        chapter = self.controller.store.chapter(index)
        if not self.controller.begin_generation(index):
            if chapter.content:
                return f"[muted]الفصل {chapter.id} مكتوب بالفعل، استخدم /twist لتغييره[/]"
            return f"[muted]الفصل {chapter.id} قيد الكتابة[/]"
        self._spawn(index, "generate")
        return ""

    def _cmd_twist(self, arg: str) -> str:
        index = self._target_index(arg)
        chapter = self.controller.store.chapter(index)
        if not self.controller.begin_twist(index):
            return f"[muted]الفصل {chapter.id} قيد الكتابة[/]"
        self._spawn(index, "twist")
        return ""

    async def _cmd_play(self) -> str:
        """Toggle: stops the clip when one is playing, otherwise reads the chapter aloud."""
        if self.player.is_playing:
            await self.player.stop()
            return "[muted]تم إيقاف الصوت[/]"

        chapter = self.controller.novel.current_chapter
        if not chapter.content:
            return "[warning]اكتب الفصل أولاً قبل الاستماع إليه[/]"

        self.player.mark_loading()
        with self.console.status("جاري توليد الصوت..."):
            audio = await self.controller.synthesize_current_chapter()
        if audio is None:
            self.player.mark_idle()
            return ""

        try:
            await self.player.play(audio)
        except AudioPlaybackError as e:
            logger.error("Playback failed: %s", e)
            self.controller.store.set_error(AUDIO_ERROR_MESSAGE)
            self.console.print(error_panel(AUDIO_ERROR_MESSAGE))
            return ""
        return f"[success]▶[/] الفصل {chapter.id}"

    def _cmd_export(self, arg: str) -> str:
        novel = self.controller.novel
        if arg.strip():
            path = Path(arg.strip()).expanduser()
        else:
            path = self.settings.export_dir / export_filename(novel.premise.title)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.controller.export_text(), encoding="utf-8")
        except OSError as e:
            logger.error("Export to %s failed: %s", path, e)
            return f"[error]تعذر حفظ الملف: {path}[/]"
        logger.info("Exported '%s' to %s", novel.premise.title, path)
        written = sum(1 for c in novel.chapters if c.content)
        self.console.print(success_panel("تم التصدير", (
            f"  الملف: [stat.value]{path}[/]\n"
            f"  الفصول: [stat.value]{written}/{len(novel.chapters)}[/]"
        )))
        return ""

    # ── main loop ─────────────────────────────────────────────────────

    async def run(self):
        """Main reading loop."""
        novel = self.controller.novel
        self.console.print(app_header(novel.premise.title))
        self.console.print(premise_panel(novel.premise))
        self.console.print(chapter_table(novel))
        self.console.print("[muted]اكتب /help لعرض الأوامر[/]")
        self.console.print()

        try:
            while True:
                try:
                    user_input = await asyncio.to_thread(
                        self.console.input, "[bright_blue]رَاوي>[/] ",
                    )
                except (EOFError, KeyboardInterrupt):
                    self.console.print("\n[muted]إلى اللقاء![/]")
                    break

                user_input = user_input.strip()
                if not user_input:
                    continue
                if not user_input.startswith("/"):
                    user_input = "/read " + user_input if user_input.isdigit() else "/help"

                result = await self.handle_command(user_input)
                if result is None:
                    self.console.print("[muted]إلى اللقاء![/]")
                    break
                if result:
                    self.console.print(result)
                    self.console.print()
        finally:
            await self.close()

    async def close(self) -> None:
        """Stop audio and cancel any chapter work still in flight."""
        await self.player.stop()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
