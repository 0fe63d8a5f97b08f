"""Desktop notifications."""

from __future__ import annotations

import logging
import shutil
import subprocess

from dictate_toggle.config import NOTIFY_TITLE

logger = logging.getLogger(__name__)

NOTIFY_TIMEOUT_S = 5.0


def notify(body: str, title: str = NOTIFY_TITLE) -> bool:
    """Show a desktop notification. Never raises; returns True if it was shown."""
    if shutil.which("notify-send") is None:
        logger.debug("notify-send not found; dropping notification: %s", body)
        return False
    try:
        result = subprocess.run(
            ["notify-send", title, body],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=NOTIFY_TIMEOUT_S,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("notify-send failed: %s", e)
        return False
    return result.returncode == 0
