"""Speech-to-text over an OpenAI-compatible transcription endpoint."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import requests

from dictate_toggle.config import API_KEY_ENV
from dictate_toggle.errors import ConfigurationError, TranscriptionError

if TYPE_CHECKING:
    from dictate_toggle.config import TranscriptionConfig

logger = logging.getLogger(__name__)

AUDIO_CONTENT_TYPE = "audio/wav"


class TranscriptionClient:
    """Uploads recorded audio and returns the transcript."""

    def __init__(
        self,
        config: "TranscriptionConfig",
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._owns_session = session is None
        self._session = session or requests.Session()

    def close(self) -> None:
        """Release the HTTP session if this client created it."""
        if self._owns_session:
            self._session.close()

    def transcribe(self, audio_path: Path) -> str:
        """
        Transcribe an audio file.

        Args:
            audio_path: WAV file to upload.

        Returns:
            The transcript with surrounding whitespace removed. May be empty
            when no speech was recognised.

        Raises:
            ConfigurationError: No API key is configured.
            TranscriptionError: The request failed, the API returned a
                non-success status, or the response was not usable JSON.
        """
        api_key = self._config.api_key
        if not api_key:
            raise ConfigurationError(f"{API_KEY_ENV} not set")

        data = {"model": self._config.model}
        if self._config.language:
            data["language"] = self._config.language

        try:
            with audio_path.open("rb") as audio:
                logger.info("Uploading %s to %s", audio_path.name, self._config.api_url)
                response = self._session.post(
                    self._config.api_url,
                    headers={"Authorization": f"Bearer {api_key}"},
                    files={"file": (audio_path.name, audio, AUDIO_CONTENT_TYPE)},
                    data=data,
                    timeout=self._config.timeout_s,
                )
        except requests.RequestException as e:
            raise TranscriptionError(f"request failed: {e}") from e
        except OSError as e:
            raise TranscriptionError(f"cannot read {audio_path.name}: {e}") from e

        if response.status_code >= 300:
            raise TranscriptionError(
                f"API error {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TranscriptionError(f"malformed JSON response: {response.text[:200]}") from e

        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise TranscriptionError("response has no text field", body=response.text)
        return text.strip()
