"""Launching and stopping the external audio recorder."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from dictate_toggle.errors import MissingDependencyError, RecorderError
from dictate_toggle.providers import tool_available

if TYPE_CHECKING:
    from dictate_toggle.config import RecorderConfig

logger = logging.getLogger(__name__)


def parse_pid(text: str) -> int:
    """Parse marker contents. Raises ValueError unless it is a positive integer."""
    pid = int(text.strip())
    if pid <= 0:
        raise ValueError(f"invalid pid {pid}")
    return pid


def read_marker(marker: Path, discard_malformed: bool = False) -> int:
    """
    Read the recorder pid stored in the marker file.

    Args:
        marker: Path of the marker.
        discard_malformed: Delete the marker when it does not hold a pid,
            so the next run is not stuck on it.

    Raises:
        RecorderError: The marker is unreadable or does not hold a valid pid.
    """
    try:
        raw = marker.read_text()
    except OSError as e:
        raise RecorderError(f"cannot read {marker.name}: {e}") from e
    try:
        return parse_pid(raw)
    except ValueError as e:
        if discard_malformed:
            remove_marker(marker)
        raise RecorderError(f"malformed pid in {marker.name}: {raw.strip()!r}") from e


def write_marker(marker: Path, pid: int) -> None:
    marker.write_text(str(pid))


def remove_marker(marker: Path, expected_pid: int | None = None) -> bool:
    """
    Delete the marker file.

    Args:
        marker: Path of the marker.
        expected_pid: When given, only delete the marker if it still names
            this pid, so a newer recording is left alone.

    Returns:
        True if a file was removed.
    """
    if expected_pid is not None:
        try:
            if parse_pid(marker.read_text()) != expected_pid:
                return False
        except (OSError, ValueError):
            return False
    try:
        marker.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("Failed to remove marker %s: %s", marker, e)
        return False
    return True


class RecorderHandle:
    """
    A launched recorder and the watcher that clears its marker on exit.

    The watcher is a daemon thread, so it only acts while this process is
    alive. Once the CLI exits the recorder keeps running and the marker is
    cleared by the next run's stop instead.
    """

    def __init__(self, process: subprocess.Popen, marker: Path) -> None:
        self.process = process
        self.marker = marker
        self.exited = threading.Event()
        self._watcher = threading.Thread(
            target=self._watch, name=f"recorder-{process.pid}", daemon=True
        )

    @property
    def pid(self) -> int:
        return self.process.pid

    def start_watcher(self) -> None:
        self._watcher.start()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the recorder has exited. Returns False on timeout."""
        return self.exited.wait(timeout)

    def _watch(self) -> None:
        returncode = self.process.wait()
        logger.info("Recorder pid=%s exited with status %s", self.pid, returncode)
        remove_marker(self.marker, expected_pid=self.pid)
        self.exited.set()


def start_recorder(config: "RecorderConfig", output_path: Path, marker: Path) -> RecorderHandle:
    """
    Launch the recorder in the background and record its pid.

    The recorder runs in its own session so it outlives this process.

    Raises:
        MissingDependencyError: The recorder binary is not on PATH.
        RecorderError: The process could not be started or its pid saved.
    """
    argv = config.argv(output_path)
    if not tool_available(argv[0]):
        raise MissingDependencyError(f"recorder {argv[0]!r} not found; install alsa-utils")

    try:
        process = subprocess.Popen(
            argv,
            cwd=output_path.parent,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        raise RecorderError(f"cannot launch {argv[0]}: {e}") from e

    try:
        write_marker(marker, process.pid)
    except OSError as e:
        process.kill()
        process.wait()
        raise RecorderError(f"cannot write {marker.name}: {e}") from e

    handle = RecorderHandle(process, marker)
    handle.start_watcher()
    logger.info("Recorder pid=%s writing %s", process.pid, output_path.name)
    return handle


def terminate(pid: int) -> None:
    """Interrupt the recorder so it finalizes its file, killing it if that fails."""
    try:
        os.kill(pid, signal.SIGINT)
        return
    except OSError as e:
        interrupt_error = e
    try:
        os.kill(pid, signal.SIGKILL)
    except OSError as kill_error:
        raise RecorderError(
            f"kill failed: {interrupt_error} (also tried SIGKILL: {kill_error})"
        ) from kill_error
    logger.warning("SIGINT to pid=%s failed (%s); sent SIGKILL", pid, interrupt_error)


def stop_recorder(marker: Path) -> int:
    """
    Stop the recorder named by the marker and remove the marker.

    Returns:
        The pid that was signalled.

    Raises:
        RecorderError: The marker was unusable or the process could not be
            signalled. A malformed marker is removed; an unreadable one is
            left for inspection.
    """
    pid = read_marker(marker, discard_malformed=True)
    try:
        terminate(pid)
    finally:
        remove_marker(marker)
    logger.info("Stopped recorder pid=%s", pid)
    return pid
