"""Exception hierarchy for the dictation toggle."""

from __future__ import annotations


class DictationError(Exception):
    """Base class for all errors reported to the user."""

    #: Set once a desktop notification has been shown for this error.
    notified = False


class ConfigurationError(DictationError):
    """A required setting (credential, display, numeric option) is missing or invalid."""


class MissingDependencyError(DictationError):
    """No usable external tool was found for a step."""

    def __init__(self, message: str, failures: list[str] | None = None) -> None:
        self.failures = list(failures or [])
        if self.failures:
            message = f"{message} (tried: {'; '.join(self.failures)})"
        super().__init__(message)


class ProviderError(DictationError):
    """A single fallback attempt failed; the next provider may still succeed."""


class RecorderError(DictationError):
    """Starting or stopping the external recorder failed."""


class TranscriptionError(DictationError):
    """The transcription request failed or returned an unusable response."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AlreadyRunningError(DictationError):
    """Another invocation holds the working-directory lock."""
