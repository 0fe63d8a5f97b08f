"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Generator

import pytest

from dictate_toggle.config import Config

ENV_VARS = [
    "OPENAI_API_KEY",
    "DICTATE_API_URL",
    "DICTATE_MODEL",
    "DICTATE_INPUT_LANGUAGE",
    "DICTATE_TIMEOUT",
    "DICTATE_WORK_DIR",
    "DICTATE_RECORDER",
    "DICTATE_FLUSH_DELAY",
    "DICTATE_TONES",
    "DICTATE_SOUNDS_DIR",
    "DICTATE_ARCHIVE",
    "DICTATE_VERBOSE",
]


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Fixture to clean environment variables before/after tests."""
    original_values = {var: os.environ.get(var) for var in ENV_VARS}

    for var in ENV_VARS:
        os.environ.pop(var, None)

    yield

    for var, value in original_values.items():
        if value is not None:
            os.environ[var] = value
        else:
            os.environ.pop(var, None)


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """An empty working directory for one toggle cycle."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def config(work_dir: Path) -> Config:
    """Configuration rooted in the temporary working directory, without cues or delays."""
    cfg = Config(work_dir=work_dir)
    cfg.tones.enabled = False
    cfg.recorder.flush_delay_s = 0.0
    cfg.transcription.api_key = "sk-test"
    return cfg


@pytest.fixture
def make_wav() -> Callable[..., Path]:
    """Factory creating small audio files, optionally with a fixed modification time."""

    def _make(path: Path, mtime: float | None = None) -> Path:
        path.write_bytes(b"RIFF\x00\x00\x00\x00WAVE")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _make
