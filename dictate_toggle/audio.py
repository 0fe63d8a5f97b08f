"""Start/stop audio cues."""

from __future__ import annotations

import io
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from scipy.io.wavfile import write as wav_write

from dictate_toggle.errors import DictationError, ProviderError
from dictate_toggle.providers import FallbackChain, Provider, run_tool

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from dictate_toggle.config import Config

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 16_000
INT16_MAX = 32767.0
PLAYER_TIMEOUT_S = 10.0

# Player command lines for packaged cue files; the path is appended.
MEDIA_PLAYERS: tuple[tuple[str, ...], ...] = (
    ("ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet"),
    ("mpv", "--no-video", "--really-quiet"),
    ("mpg123", "-q"),
)

# Players that accept a WAV stream on stdin.
PIPE_PLAYERS: tuple[str, ...] = ("paplay", "aplay")


def tone_samples(
    frequency_hz: float,
    duration_s: float,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    volume: float = 0.3,
) -> "NDArray[np.int16]":
    n_samples = int(sample_rate * duration_s)
    t = np.arange(n_samples, dtype=np.float64) / sample_rate
    tone = np.round(INT16_MAX * volume * np.sin(2.0 * np.pi * frequency_hz * t))
    return tone.astype("<i2")


def synthesize_tone_wav(
    frequency_hz: float,
    duration_s: float,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    volume: float = 0.3,
) -> bytes:
    """
    Render a sine tone as an in-memory WAV file.

    The result is mono 16-bit little-endian PCM with a 44-byte header, so
    it is ``44 + 2 * int(sample_rate * duration_s)`` bytes long.

    Args:
        frequency_hz: Tone frequency.
        duration_s: Tone length in seconds.
        sample_rate: Samples per second.
        volume: Peak amplitude as a fraction of full scale.

    Returns:
        The complete WAV file contents.
    """
    buf = io.BytesIO()
    wav_write(buf, sample_rate, tone_samples(frequency_hz, duration_s, sample_rate, volume))
    return buf.getvalue()


class MediaFilePlayer(Provider[Path]):
    """Plays a cue file with an external media player."""

    def __init__(self, argv: tuple[str, ...]) -> None:
        self._argv = argv
        self.name = argv[0]
        self.requires = (argv[0],)

    def run(self, payload: Path) -> None:
        run_tool([*self._argv, str(payload)], timeout=PLAYER_TIMEOUT_S)


class WavPipePlayer(Provider[bytes]):
    """Pipes an in-memory WAV to a system audio player."""

    def __init__(self, command: str) -> None:
        self.name = command
        self.requires = (command,)

    def run(self, payload: bytes) -> None:
        run_tool([self.name], input_data=payload, timeout=PLAYER_TIMEOUT_S)


class TerminalBell(Provider[bytes]):
    """Last resort: ring the terminal bell."""

    name = "bell"

    def run(self, payload: bytes) -> None:
        stream = sys.stdout
        if stream is None:
            raise ProviderError("no terminal attached")
        try:
            stream.write("\a")
            stream.flush()
        except ValueError as e:
            raise ProviderError(f"terminal closed: {e}") from e


def media_chain() -> FallbackChain[Path]:
    return FallbackChain(
        "cue file",
        [MediaFilePlayer(argv) for argv in MEDIA_PLAYERS],
        "no media player could play the cue file",
    )


def tone_chain() -> FallbackChain[bytes]:
    players: list[Provider[bytes]] = [WavPipePlayer(cmd) for cmd in PIPE_PLAYERS]
    players.append(TerminalBell())
    return FallbackChain("cue tone", players, "no audio player for the cue tone")


def play_cue(is_start: bool, config: "Config") -> None:
    """Play the start or stop cue. Best effort: never raises."""
    tones = config.tones
    if not tones.enabled:
        return

    cue_file = config.cue_path(is_start)
    if cue_file.is_file():
        try:
            media_chain().run(cue_file)
            return
        except DictationError as e:
            logger.debug("Cue file playback failed: %s", e)

    frequency = tones.start_hz if is_start else tones.stop_hz
    wav = synthesize_tone_wav(frequency, tones.duration_s, tones.sample_rate, tones.volume)
    try:
        tone_chain().run(wav)
    except DictationError as e:
        logger.debug("Cue tone playback failed: %s", e)
