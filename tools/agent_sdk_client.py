"""Claude Agent SDK wrapper used for every text generation call."""

import logging
import os
from typing import Callable, Optional

from claude_agent_sdk import (
    query,
    ClaudeAgentOptions,
    ResultMessage,
    AssistantMessage,
)

from config.settings import Settings
from tools.llm_client import parse_json_response
from config.exceptions import LLMError, LLMEmptyResponseError, LLMResponseParseError

logger = logging.getLogger(__name__)

# Allow launching Agent SDK even when running inside a Claude Code session.
# The SDK checks for this env var and refuses to start if set.
os.environ.pop("CLAUDECODE", None)


class AgentSDKClient:
    """Single-turn text and JSON requests over claude_agent_sdk.query().

    Authentication is handled automatically by Claude Code CLI.
    Nothing here retries: a failed call raises and the caller decides.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.total_calls = 0

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        on_event: Optional[Callable[[dict], None]] = None,
    ) -> str:
        """Send a request and return the text result.

        Args:
            system_prompt: System message guiding the model's behavior.
            user_prompt: User message content.
            model: Model name override. Defaults to writing model.
            on_event: Optional callback fired with progress events:
                      {"type": "thinking", "text": str}  — model is reasoning
                      {"type": "text",     "text": str}  — first text chunk
                      {"type": "result"}                 — final result ready

        Returns:
            The model's text response; empty string when nothing came back.

        Raises:
            LLMError: If the query fails.
        """
        model = model or self.settings.llm_model_writing
        self.total_calls += 1

        logger.debug("AgentSDK call: model=%s, prompt=%d chars", model, len(user_prompt))

        try:
            result_text = ""
            _text_fired = False
            # Do NOT return/break early from inside the async for loop: query()
            # uses anyio cancel scopes and must be exhausted in the same task.
            async for message in query(
                prompt=user_prompt,
                options=ClaudeAgentOptions(
                    system_prompt=system_prompt,
                    model=model,
                    max_turns=1,
                ),
            ):
                if isinstance(message, ResultMessage):
                    result_text = message.result or result_text
                    logger.debug(
                        "AgentSDK result: %d chars, cost=$%s",
                        len(result_text),
                        message.total_cost_usd,
                    )
                    if on_event:
                        on_event({"type": "result"})
                elif isinstance(message, AssistantMessage):
                    for block in message.content:
                        if getattr(block, "type", None) == "thinking":
                            thinking = getattr(block, "thinking", "")
                            if thinking and on_event:
                                on_event({"type": "thinking", "text": thinking})
                            continue
                        text = getattr(block, "text", None)
                        if text:
                            if on_event and not _text_fired:
                                _text_fired = True
                                on_event({"type": "text", "text": text})
                            if not result_text:
                                result_text += text
        except Exception as e:
            raise LLMError(f"Agent SDK query failed: {e}") from e

        if not result_text:
            logger.warning("AgentSDK returned no content")

        return result_text

    async def chat_json(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        operation: str = "json request",
    ) -> dict:
        """Send a request and parse the response as JSON.

        Args:
            system_prompt: System message guiding the model's behavior.
            user_prompt: User message content.
            model: Model name override.
            operation: Label used in errors and logs.

        Returns:
            Parsed JSON dict from the response.

        Raises:
            LLMEmptyResponseError: If the response is empty.
            LLMResponseParseError: If response cannot be parsed as JSON.
        """
        text = await self.chat(system_prompt, user_prompt, model)
        if not text.strip():
            raise LLMEmptyResponseError(operation)
        try:
            return parse_json_response(text)
        except ValueError as e:
            raise LLMResponseParseError(str(e), raw_response=text) from e

    def get_usage_summary(self) -> dict:
        """Return call count statistics."""
        return {"total_calls": self.total_calls}
