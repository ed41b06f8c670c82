"""Writer Agent: full prose for one chapter."""

import logging
from typing import Callable, Optional

from agents.base_agent import BaseAgent
from models.chapter import Chapter
from models.novel import Premise
from tools.text_utils import count_words

logger = logging.getLogger(__name__)

# Soft-failure text when the provider returns no prose
EMPTY_CONTENT_FALLBACK = "عذراً، لم يتم إنشاء نص لهذا الفصل."
_FIRST_CHAPTER_CONTEXT = "هذا هو الفصل الأول."


class WriterAgent(BaseAgent):
    """Generates chapter content from its summary and the continuity context."""

    template_name = "writer"
    instruction_section = "تعليمات الكتابة"

    async def write_chapter(
        self,
        premise: Premise,
        chapter: Chapter,
        prior_context: str = "",
        on_event: Optional[Callable[[dict], None]] = None,
    ) -> str:
        """Write a single chapter.

        Args:
            premise: The novel's premise.
            chapter: Chapter stub; its summary drives the prose.
            prior_context: Condensed summaries of the earlier chapters.
            on_event: Optional progress callback forwarded to the client.

        Returns:
            The chapter text, or EMPTY_CONTENT_FALLBACK if the provider
            produced none.
        """
        user_prompt = self.build_user_prompt(
            title=premise.title,
            tone=premise.tone.value,
            chapter_number=chapter.id,
            chapter_title=chapter.title,
            chapter_summary=chapter.summary,
            context=prior_context or _FIRST_CHAPTER_CONTEXT,
        )

        logger.info("Writing chapter %d...", chapter.id)

        content = await self.llm.chat(
            system_prompt=self.system_prompt,
            user_prompt=user_prompt,
            model=self.settings.llm_model_writing,
            on_event=on_event,
        )
        content = content.strip()

        if not content:
            logger.warning("Chapter %d: provider returned no text, using fallback", chapter.id)
            return EMPTY_CONTENT_FALLBACK

        logger.info("Chapter %d written: %d words", chapter.id, count_words(content))
        return content
