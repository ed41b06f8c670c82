"""Premise Agent: suggests a random novel idea inside the genre/tone vocabularies."""

import logging

from agents.base_agent import BaseAgent
from config.exceptions import LLMResponseParseError
from models.enums import Genre, Tone
from models.novel import Premise

logger = logging.getLogger(__name__)


class PremiseAgent(BaseAgent):
    """Asks the fast model for a complete, original premise."""

    template_name = "premise"
    instruction_section = "تعليمات الفكرة"

    async def suggest_premise(self) -> Premise:
        """Return a provider-suggested premise.

        Raises:
            LLMEmptyResponseError: If the provider returns nothing.
            LLMResponseParseError: If the payload is not a valid premise.
        """
        user_prompt = self.build_user_prompt(
            genres="، ".join(Genre.labels()),
            tones="، ".join(Tone.labels()),
        )

        logger.info("Requesting premise suggestion...")
        data = await self.llm.chat_json(
            system_prompt=self.system_prompt,
            user_prompt=user_prompt,
            model=self.settings.llm_model_fast,
            operation="premise",
        )

        try:
            premise = Premise.from_dict(data)
        except ValueError as e:
            raise LLMResponseParseError(f"Invalid premise payload: {e}", raw_response=str(data)) from e

        logger.info("Premise suggested: '%s' (%s / %s)", premise.title, premise.genre.name, premise.tone.name)
        return premise
