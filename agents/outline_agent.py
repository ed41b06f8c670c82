"""Outline Agent: turns a premise into the ordered list of chapter stubs."""

import logging

from agents.base_agent import BaseAgent
from config.exceptions import LLMResponseParseError
from models.chapter import Chapter
from models.novel import Premise

logger = logging.getLogger(__name__)


def _parse_chapters(data: dict) -> list[Chapter]:
    """Validate the outline payload and number chapters 1..N in response order."""
    entries = data.get("chapters")
    if not isinstance(entries, list):
        raise ValueError("Outline payload has no 'chapters' list")
    if not entries:
        raise ValueError("Outline contains no chapters")

    chapters = []
    for position, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            raise ValueError(f"Chapter {position} is not an object")
        title = entry.get("title")
        summary = entry.get("summary")
        if not isinstance(title, str) or not title.strip():
            raise ValueError(f"Chapter {position} has no title")
        if not isinstance(summary, str) or not summary.strip():
            raise ValueError(f"Chapter {position} has no summary")
        chapters.append(Chapter(id=position, title=title.strip(), summary=summary.strip()))
    return chapters


class OutlineAgent(BaseAgent):
    """Plans the novel's chapters in one request."""

    template_name = "outline"
    instruction_section = "تعليمات المخطط"

    async def generate_outline(self, premise: Premise) -> list[Chapter]:
        """Generate chapter stubs for ``premise``.

        There is no soft fallback: an empty or malformed outline is a hard
        failure, since the session has nothing sensible to continue with.

        Raises:
            LLMEmptyResponseError: If the provider returns nothing.
            LLMResponseParseError: If the payload is malformed or has no chapters.
        """
        user_prompt = self.build_user_prompt(
            title=premise.title,
            genre=premise.genre.value,
            tone=premise.tone.value,
            protagonist=premise.protagonist,
            setting=premise.setting,
            plot_summary=premise.plot_summary,
            target_audience=premise.target_audience,
            min_chapters=self.settings.outline_min_chapters,
            max_chapters=self.settings.outline_max_chapters,
        )

        logger.info("Generating outline for '%s'...", premise.title)
        data = await self.llm.chat_json(
            system_prompt=self.system_prompt,
            user_prompt=user_prompt,
            model=self.settings.llm_model_writing,
            operation="outline",
        )

        try:
            chapters = _parse_chapters(data)
        except ValueError as e:
            raise LLMResponseParseError(f"Invalid outline payload: {e}", raw_response=str(data)) from e

        count = len(chapters)
        if not self.settings.outline_min_chapters <= count <= self.settings.outline_max_chapters:
            logger.warning(
                "Outline has %d chapters, outside requested range %d-%d",
                count, self.settings.outline_min_chapters, self.settings.outline_max_chapters,
            )

        logger.info("Outline generated: %d chapters", count)
        return chapters
