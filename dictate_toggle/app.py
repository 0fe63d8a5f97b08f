"""Main dictation toggle."""

from __future__ import annotations

import logging
import time
from enum import Enum
from pathlib import Path
from typing import Callable, NoReturn

from dictate_toggle.audio import play_cue
from dictate_toggle.config import Config
from dictate_toggle.errors import DictationError
from dictate_toggle.notify import notify
from dictate_toggle.output import insert_text
from dictate_toggle.recorder import RecorderHandle, start_recorder, stop_recorder
from dictate_toggle.state import dispose_audio, find_audio_files, instance_lock, select_newest
from dictate_toggle.transcribe import TranscriptionClient

logger = logging.getLogger(__name__)


class Action(str, Enum):
    STARTED = "started"
    TRANSCRIBED = "transcribed"
    NO_AUDIO = "no_audio"
    NO_SPEECH = "no_speech"


class DictationToggle:
    """
    Toggle between recording and transcribing.

    Each run decides what to do from the working directory alone: with no
    pending audio and no recorder marker it starts a recording; otherwise
    it stops the recorder (if one is running), transcribes the newest
    audio file and types the result into the focused window.
    """

    def __init__(
        self,
        config: Config | None = None,
        client: TranscriptionClient | None = None,
        inserter: Callable[[str], object] = insert_text,
        cue_player: Callable[[bool, Config], None] = play_cue,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config or Config()
        # Built on first transcription; the start path never opens a session.
        self._client = client
        self._insert = inserter
        self._play_cue = cue_player
        self._sleep = sleep
        self.recorder: RecorderHandle | None = None

    def run(self) -> Action:
        """Perform one toggle step while holding the working-directory lock."""
        with instance_lock(self._config.lock_path):
            return self._toggle()

    def _toggle(self) -> Action:
        recorder_cfg = self._config.recorder
        pending = find_audio_files(self._config.work_dir, recorder_cfg.audio_pattern)
        marker = self._config.marker_path

        if not pending and not marker.exists():
            self.start_recording()
            return Action.STARTED

        if marker.exists():
            self.stop_recording()
            pending = find_audio_files(self._config.work_dir, recorder_cfg.audio_pattern)

        audio = select_newest(pending)
        if audio is None:
            logger.warning("Recorder stopped but no audio file was written")
            notify("No audio captured")
            return Action.NO_AUDIO

        return self.transcribe_and_insert(audio)

    def start_recording(self) -> RecorderHandle:
        """Launch the recorder and play the start cue."""
        try:
            self.recorder = start_recorder(
                self._config.recorder,
                self._config.recording_path,
                self._config.marker_path,
            )
        except DictationError as e:
            self._fail("Could not start recorder", e)
        self._play_cue(True, self._config)
        return self.recorder

    def stop_recording(self) -> None:
        """Stop the recorder and give it time to flush its output."""
        try:
            stop_recorder(self._config.marker_path)
        except DictationError as e:
            self._fail("Could not stop recorder", e)
        self._sleep(self._config.recorder.flush_delay_s)

    def transcribe_and_insert(self, audio: Path) -> Action:
        """
        Transcribe an audio file and type the result.

        The file is only removed once the text has been inserted, so a
        failure leaves it in place for the next run.
        """
        self._play_cue(False, self._config)

        client = self._client or TranscriptionClient(self._config.transcription)
        try:
            text = client.transcribe(audio)
        except DictationError as e:
            self._fail("Transcription failed", e)
        finally:
            if client is not self._client:
                client.close()

        if not text:
            logger.warning("No speech detected in %s", audio.name)
            notify("No speech detected")
            dispose_audio(audio, self._config.processed_dir)
            return Action.NO_SPEECH

        try:
            self._insert(text)
        except DictationError as e:
            self._fail("Insert failed", e)

        dispose_audio(audio, self._config.processed_dir)
        return Action.TRANSCRIBED

    def _fail(self, context: str, error: DictationError) -> NoReturn:
        notify(f"{context}: {error}")
        error.notified = True
        raise error
