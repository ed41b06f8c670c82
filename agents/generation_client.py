"""The generation-client contract and its Agent SDK + Gemini implementation.

The workflow depends only on ``GenerationClient``; swapping providers means
writing another class with the same five coroutines.
"""

import logging
from typing import Optional, Protocol, runtime_checkable

from agents.outline_agent import OutlineAgent
from agents.premise_agent import PremiseAgent
from agents.twist_agent import TwistAgent
from agents.writer_agent import WriterAgent
from config.settings import Settings
from models.chapter import Chapter
from models.novel import Premise
from tools.agent_sdk_client import AgentSDKClient
from tools.speech_client import SpeechClient

logger = logging.getLogger(__name__)


@runtime_checkable
class GenerationClient(Protocol):
    """Five single-attempt provider operations.

    Hard failures raise ``LLMError`` subclasses. Content and twist
    generation substitute fallbacks for empty text instead of failing.
    """

    async def suggest_premise(self) -> Premise:
        ...

    async def generate_outline(self, premise: Premise) -> list[Chapter]:
        ...

    async def generate_chapter_content(self, premise: Premise, chapter: Chapter, prior_context: str) -> str:
        ...

    async def generate_twist(self, premise: Premise, chapter: Chapter, prior_context: str) -> str:
        ...

    async def synthesize_speech(self, text: str) -> bytes:
        ...


class AgentGenerationClient:
    """Text through the Claude Agent SDK agents, speech through Gemini TTS."""

    def __init__(
        self,
        llm_client: Optional[AgentSDKClient] = None,
        speech_client: Optional[SpeechClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        self.llm = llm_client or AgentSDKClient(self.settings)
        self.speech = speech_client or SpeechClient(self.settings)

        self.premise_agent = PremiseAgent(llm_client=self.llm, settings=self.settings)
        self.outline_agent = OutlineAgent(llm_client=self.llm, settings=self.settings)
        self.writer_agent = WriterAgent(llm_client=self.llm, settings=self.settings)
        self.twist_agent = TwistAgent(llm_client=self.llm, settings=self.settings)

    async def suggest_premise(self) -> Premise:
        return await self.premise_agent.suggest_premise()

    async def generate_outline(self, premise: Premise) -> list[Chapter]:
        return await self.outline_agent.generate_outline(premise)

    async def generate_chapter_content(self, premise: Premise, chapter: Chapter, prior_context: str) -> str:
        return await self.writer_agent.write_chapter(premise, chapter, prior_context)

    async def generate_twist(self, premise: Premise, chapter: Chapter, prior_context: str) -> str:
        return await self.twist_agent.rewrite_summary(premise, chapter, prior_context)

    async def synthesize_speech(self, text: str) -> bytes:
        return await self.speech.synthesize(text)

    def get_usage_summary(self) -> dict:
        return {
            "text_calls": self.llm.get_usage_summary()["total_calls"],
            "speech_calls": self.speech.total_calls,
        }
