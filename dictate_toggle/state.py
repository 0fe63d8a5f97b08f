"""Filesystem state: pending audio files, the instance lock and the archive."""

from __future__ import annotations

import fcntl
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence

from dictate_toggle.errors import AlreadyRunningError, ConfigurationError

logger = logging.getLogger(__name__)


def find_audio_files(work_dir: Path, pattern: str = "*.wav") -> list[Path]:
    """
    List pending audio files, newest first.

    Files are ordered by modification time; ties fall back to the file
    name so the order is stable. Files removed between the directory scan
    and the ``stat`` call are skipped.
    """
    found: list[tuple[int, str, Path]] = []
    for path in work_dir.glob(pattern):
        try:
            stat = path.stat()
        except FileNotFoundError:
            continue
        if path.is_file():
            found.append((stat.st_mtime_ns, path.name, path))
    found.sort(reverse=True)
    return [path for _, _, path in found]


def select_newest(paths: Sequence[Path]) -> Path | None:
    """Return the first entry of an ordering from find_audio_files."""
    if not paths:
        return None
    if len(paths) > 1:
        logger.warning(
            "Multiple audio files pending; using %s and leaving %s",
            paths[0].name,
            ", ".join(p.name for p in paths[1:]),
        )
    return paths[0]


@contextmanager
def instance_lock(path: Path) -> Iterator[None]:
    """
    Hold an exclusive advisory lock for the duration of the block.

    Raises:
        AlreadyRunningError: Another process already holds the lock.
        ConfigurationError: The lock file cannot be created, usually because
            the working directory does not exist.
    """
    try:
        handle = open(path, "a")
    except OSError as e:
        raise ConfigurationError(f"cannot open lock file {path}: {e}") from e
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError as e:
        handle.close()
        raise AlreadyRunningError(f"another dictation toggle holds {path}") from e
    try:
        yield
    finally:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        handle.close()


def archive_processed(path: Path, processed_dir: Path, now: float | None = None) -> Path:
    """Move a handled audio file into ``processed_dir`` with a timestamp prefix."""
    processed_dir.mkdir(parents=True, exist_ok=True)
    stamp = int(time.time() if now is None else now)
    destination = processed_dir / f"{stamp}_{path.name}"
    path.rename(destination)
    return destination


def dispose_audio(path: Path, processed_dir: Path | None = None) -> None:
    """Delete or archive a handled audio file. Failures are only logged."""
    try:
        if processed_dir is not None:
            destination = archive_processed(path, processed_dir)
            logger.info("Archived %s to %s", path.name, destination)
        else:
            path.unlink()
            logger.info("Removed %s", path.name)
    except OSError as e:
        logger.warning("Could not dispose of %s: %s", path, e)
