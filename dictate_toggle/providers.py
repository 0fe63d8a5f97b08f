"""Ordered fallback chains over external tools."""

from __future__ import annotations

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from typing import Generic, Sequence, TypeVar

from dictate_toggle.errors import MissingDependencyError, ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

STDERR_SNIPPET_CHARS = 200


def tool_available(name: str) -> bool:
    return shutil.which(name) is not None


def run_tool(
    argv: Sequence[str],
    input_data: bytes | None = None,
    timeout: float | None = None,
) -> None:
    """
    Run an external tool to completion.

    Args:
        argv: Command line; ``argv[0]`` is looked up on PATH.
        input_data: Bytes piped to the tool's stdin, if any.
        timeout: Seconds before the tool is killed.

    Raises:
        ProviderError: The tool could not be launched, timed out, or
            exited with a non-zero status.
    """
    try:
        result = subprocess.run(
            list(argv),
            input=input_data,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise ProviderError(f"{argv[0]}: {e}") from e

    if result.returncode != 0:
        stderr = (result.stderr or b"").decode(errors="replace").strip()
        message = f"{argv[0]} exited with status {result.returncode}"
        if stderr:
            message += f": {stderr[:STDERR_SNIPPET_CHARS]}"
        raise ProviderError(message)


class Provider(ABC, Generic[T]):
    """One way of performing a step, tried in priority order."""

    name: str = "provider"
    requires: tuple[str, ...] = ()

    def is_available(self) -> bool:
        """True when every external tool this provider needs is on PATH."""
        return all(tool_available(tool) for tool in self.requires)

    @abstractmethod
    def run(self, payload: T) -> None:
        """Perform the step, raising ProviderError on failure."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class FallbackChain(Generic[T]):
    """Tries providers in order until one succeeds."""

    def __init__(
        self,
        label: str,
        providers: Sequence[Provider[T]],
        exhausted_message: str,
    ) -> None:
        self.label = label
        self.providers = list(providers)
        self._exhausted_message = exhausted_message

    def run(self, payload: T) -> Provider[T]:
        """
        Run the first available provider that succeeds.

        Returns:
            The provider that handled the payload.

        Raises:
            MissingDependencyError: Every provider was unavailable or failed.
        """
        failures: list[str] = []
        for provider in self.providers:
            if not provider.is_available():
                logger.debug("%s: %s unavailable, skipping", self.label, provider.name)
                continue
            try:
                provider.run(payload)
            except (ProviderError, OSError) as e:
                logger.warning("%s: %s failed: %s", self.label, provider.name, e)
                failures.append(f"{provider.name}: {e}")
                continue
            logger.info("%s: handled by %s", self.label, provider.name)
            return provider

        raise MissingDependencyError(self._exhausted_message, failures)
