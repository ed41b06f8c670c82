"""Twist Agent: rewrites a chapter summary around a surprise event."""

import logging

from agents.base_agent import BaseAgent
from models.chapter import Chapter
from models.novel import Premise

logger = logging.getLogger(__name__)

_STORY_START_CONTEXT = "بداية القصة."


class TwistAgent(BaseAgent):
    template_name = "twist"
    instruction_section = "تعليمات الحبكة"

    async def rewrite_summary(self, premise: Premise, chapter: Chapter, prior_context: str = "") -> str:
        """Return the twisted summary, or the original one if nothing came back."""
        user_prompt = self.build_user_prompt(
            genre=premise.genre.value,
            context=prior_context or _STORY_START_CONTEXT,
            chapter_summary=chapter.summary,
        )

        logger.info("Requesting plot twist for chapter %d...", chapter.id)

        summary = await self.llm.chat(
            system_prompt=self.system_prompt,
            user_prompt=user_prompt,
            model=self.settings.llm_model_writing,
        )
        summary = summary.strip()

        if not summary:
            logger.warning("Chapter %d: empty twist, keeping original summary", chapter.id)
            return chapter.summary
        return summary
