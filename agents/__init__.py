"""Agents package — prompt-driven agents and the generation client."""

from agents.base_agent import BaseAgent
from agents.premise_agent import PremiseAgent
from agents.outline_agent import OutlineAgent
from agents.writer_agent import WriterAgent, EMPTY_CONTENT_FALLBACK
from agents.twist_agent import TwistAgent
from agents.generation_client import GenerationClient, AgentGenerationClient

__all__ = [
    "BaseAgent",
    "PremiseAgent",
    "OutlineAgent",
    "WriterAgent",
    "TwistAgent",
    "GenerationClient",
    "AgentGenerationClient",
    "EMPTY_CONTENT_FALLBACK",
]
