"""Tools package — provider clients, audio output, parsing and text utilities."""

from tools.agent_sdk_client import AgentSDKClient
from tools.audio_player import AudioPlayer
from tools.llm_client import parse_json_response
from tools.speech_client import SpeechClient
from tools.text_utils import (
    build_continuity_context,
    export_novel_text,
    export_filename,
    count_words,
    shorten,
)

__all__ = [
    "AgentSDKClient",
    "AudioPlayer",
    "SpeechClient",
    "parse_json_response",
    "build_continuity_context",
    "export_novel_text",
    "export_filename",
    "count_words",
    "shorten",
]
