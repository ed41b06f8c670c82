"""Gemini text-to-speech wrapper."""

import logging
from typing import Optional

from google import genai
from google.genai import types

from config.exceptions import InvalidConfigError, SpeechSynthesisError
from config.settings import Settings

logger = logging.getLogger(__name__)

_READ_ALOUD_PROMPT = "اقرأ النص التالي باللغة العربية قراءة معبرة:\n\n{text}"


def _extract_audio(response) -> Optional[bytes]:
    """Return the inline audio payload of the first candidate, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None
    inline_data = getattr(parts[0], "inline_data", None)
    return getattr(inline_data, "data", None) or None


class SpeechClient:
    """Synthesizes chapter audio with a Gemini TTS model.

    The returned bytes are raw 16-bit little-endian mono PCM at
    ``settings.audio_sample_rate``.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self._client: Optional[genai.Client] = None
        self.total_calls = 0

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.settings.google_api_key:
                raise InvalidConfigError("GOOGLE_API_KEY is missing", {"setting": "google_api_key"})
            self._client = genai.Client(api_key=self.settings.google_api_key)
        return self._client

    async def synthesize(self, text: str) -> bytes:
        """Request speech for ``text`` and return the raw audio bytes.

        Raises:
            InvalidConfigError: If no API key is configured.
            SpeechSynthesisError: If the call fails or no audio comes back.
        """
        client = self.client
        self.total_calls += 1
        logger.debug(
            "TTS call: model=%s, voice=%s, text=%d chars",
            self.settings.tts_model, self.settings.tts_voice, len(text),
        )

        try:
            response = await client.aio.models.generate_content(
                model=self.settings.tts_model,
                contents=_READ_ALOUD_PROMPT.format(text=text),
                config=types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(
                                voice_name=self.settings.tts_voice,
                            )
                        )
                    ),
                ),
            )
        except Exception as e:
            raise SpeechSynthesisError(f"Speech request failed: {e}") from e

        audio = _extract_audio(response)
        if not audio:
            raise SpeechSynthesisError("No audio payload in speech response")

        logger.debug("TTS result: %d bytes", len(audio))
        return audio
