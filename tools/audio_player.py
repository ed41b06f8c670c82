"""Single-clip audio output for read-aloud playback.

The player owns one output resource: an external player process fed a
temporary WAV file. Starting a clip stops the current one first; the
resource is released on stop(), on natural completion and on close().
"""

import asyncio
import logging
import os
import shlex
import tempfile
import wave
from pathlib import Path
from typing import Optional

from config.exceptions import AudioPlaybackError
from models.enums import AudioState

logger = logging.getLogger(__name__)


def write_wav(pcm: bytes, path: Path, sample_rate: int = 24000) -> Path:
    """Wrap raw 16-bit mono PCM into a WAV container."""
    with wave.open(str(path), "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return path


class AudioPlayer:
    """Plays PCM clips one at a time through an external command."""

    def __init__(self, command: str = "ffplay -nodisp -autoexit -loglevel quiet", sample_rate: int = 24000):
        self.command = shlex.split(command)
        self.sample_rate = sample_rate
        self._state = AudioState.IDLE
        self._process: Optional[asyncio.subprocess.Process] = None
        self._watcher: Optional[asyncio.Task] = None
        self._wav_path: Optional[Path] = None

    @property
    def state(self) -> AudioState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state == AudioState.PLAYING

    def mark_loading(self) -> None:
        """Show that a clip is being prepared (speech synthesis in flight)."""
        self._state = AudioState.LOADING

    def mark_idle(self) -> None:
        if self._process is None:
            self._state = AudioState.IDLE

    async def play(self, pcm: bytes) -> None:
        """Start playing ``pcm``, stopping any clip already playing.

        Raises:
            AudioPlaybackError: If the player command cannot be launched.
        """
        await self.stop()

        fd, name = tempfile.mkstemp(prefix="rawi-", suffix=".wav")
        os.close(fd)
        try:
            wav_path = write_wav(pcm, Path(name), self.sample_rate)
        except (OSError, wave.Error) as e:
            Path(name).unlink(missing_ok=True)
            self._state = AudioState.IDLE
            raise AudioPlaybackError(f"Cannot write audio file: {e}", {"path": name}) from e

        try:
            process = await asyncio.create_subprocess_exec(
                *self.command, str(wav_path),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            wav_path.unlink(missing_ok=True)
            self._state = AudioState.IDLE
            raise AudioPlaybackError(f"Cannot start audio player: {e}", {"command": self.command[0]}) from e

        self._process = process
        self._wav_path = wav_path
        self._state = AudioState.PLAYING
        self._watcher = asyncio.create_task(self._wait_for_completion(process))
        logger.info("Playback started: %d bytes, pid=%s", len(pcm), process.pid)

    async def _wait_for_completion(self, process: asyncio.subprocess.Process) -> None:
        await process.wait()
        # A newer clip may already own the resource
        if self._process is process:
            logger.info("Playback finished")
            self._release()

    async def stop(self) -> None:
        """Stop the current clip, if any, and release the resource."""
        process = self._process
        watcher = self._watcher
        if process is None:
            self._state = AudioState.IDLE
            return

        self._release()
        if process.returncode is None:
            try:
                process.terminate()
            except ProcessLookupError:
                pass
            await process.wait()
        if watcher is not None and not watcher.done():
            watcher.cancel()
        logger.info("Playback stopped")

    async def close(self) -> None:
        await self.stop()

    async def __aenter__(self) -> "AudioPlayer":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _release(self) -> None:
        if self._wav_path is not None:
            self._wav_path.unlink(missing_ok=True)
        self._process = None
        self._watcher = None
        self._wav_path = None
        self._state = AudioState.IDLE
