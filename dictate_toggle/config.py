"""Configuration for the dictation toggle."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dictate_toggle.errors import ConfigurationError

API_KEY_ENV = "OPENAI_API_KEY"
NOTIFY_TITLE = "Dictation"


def _env_flag(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


@dataclass
class RecorderConfig:
    command: str = "arecord"
    sample_rate: int = 16_000
    channels: int = 1
    output_filename: str = "dictation_recording.wav"
    marker_filename: str = ".dictation_recording.pid"
    lock_filename: str = ".dictation.lock"
    audio_pattern: str = "*.wav"
    flush_delay_s: float = 0.3

    def argv(self, output_path: Path) -> list[str]:
        """Command line capturing mono 16-bit PCM into ``output_path``."""
        return [
            self.command,
            "-q",
            "-f", "S16_LE",
            "-r", str(self.sample_rate),
            "-c", str(self.channels),
            str(output_path),
        ]


@dataclass
class TranscriptionConfig:
    api_url: str = "https://api.openai.com/v1/audio/transcriptions"
    model: str = "whisper-1"
    language: str | None = None
    timeout_s: float = 120.0
    api_key: str | None = field(default=None, repr=False)


@dataclass
class ToneConfig:
    enabled: bool = True
    start_hz: int = 220
    stop_hz: int = 220
    duration_s: float = 0.09
    volume: float = 0.3
    sample_rate: int = 16_000
    start_file: str = "on.mp3"
    stop_file: str = "off.mp3"
    sounds_dir: Path | None = None


@dataclass
class Config:
    work_dir: Path = field(default_factory=Path.cwd)
    recorder: RecorderConfig = field(default_factory=RecorderConfig)
    transcription: TranscriptionConfig = field(default_factory=TranscriptionConfig)
    tones: ToneConfig = field(default_factory=ToneConfig)
    archive_processed: bool = False
    processed_dirname: str = "processed"
    verbose: bool = False

    @property
    def marker_path(self) -> Path:
        return self.work_dir / self.recorder.marker_filename

    @property
    def lock_path(self) -> Path:
        return self.work_dir / self.recorder.lock_filename

    @property
    def recording_path(self) -> Path:
        return self.work_dir / self.recorder.output_filename

    @property
    def processed_dir(self) -> Path | None:
        """Archive directory for handled audio, or None to delete it instead."""
        if not self.archive_processed:
            return None
        return self.work_dir / self.processed_dirname

    def cue_path(self, is_start: bool) -> Path:
        base = self.tones.sounds_dir or self.work_dir
        return base / (self.tones.start_file if is_start else self.tones.stop_file)

    @classmethod
    def from_env(cls) -> "Config":
        config = cls()

        if work_dir := os.environ.get("DICTATE_WORK_DIR"):
            config.work_dir = Path(work_dir).expanduser()

        config.transcription.api_key = os.environ.get(API_KEY_ENV) or None

        if url := os.environ.get("DICTATE_API_URL"):
            config.transcription.api_url = url

        if model := os.environ.get("DICTATE_MODEL"):
            config.transcription.model = model

        if lang := os.environ.get("DICTATE_INPUT_LANGUAGE"):
            config.transcription.language = None if lang.lower() == "auto" else lang

        if timeout := os.environ.get("DICTATE_TIMEOUT"):
            config.transcription.timeout_s = _env_float("DICTATE_TIMEOUT", timeout)

        if recorder := os.environ.get("DICTATE_RECORDER"):
            config.recorder.command = recorder

        if delay := os.environ.get("DICTATE_FLUSH_DELAY"):
            config.recorder.flush_delay_s = _env_float("DICTATE_FLUSH_DELAY", delay)

        if tones := os.environ.get("DICTATE_TONES"):
            config.tones.enabled = _env_flag(tones)

        if sounds_dir := os.environ.get("DICTATE_SOUNDS_DIR"):
            config.tones.sounds_dir = Path(sounds_dir).expanduser()

        if archive := os.environ.get("DICTATE_ARCHIVE"):
            config.archive_processed = _env_flag(archive)

        if verbose := os.environ.get("DICTATE_VERBOSE"):
            config.verbose = _env_flag(verbose)

        return config
