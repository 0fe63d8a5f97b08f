"""Inserting transcribed text into the focused window."""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Mapping, Sequence

import pyperclip

from dictate_toggle.errors import ConfigurationError, ProviderError
from dictate_toggle.notify import notify
from dictate_toggle.providers import FallbackChain, Provider, run_tool, tool_available

logger = logging.getLogger(__name__)

X11_CLIPBOARDS = ("xclip", "xsel")
WAYLAND_CLIPBOARD = "wl-clipboard"
WAYLAND_COPY_TOOL = "wl-copy"
PASTE_KEYS = "ctrl+v"
PASTE_MANUALLY = "Transcribed text copied to clipboard - please paste into target app"
TOOL_TIMEOUT_S = 30.0

# pyperclip backend name -> executable it drives
_CLIPBOARD_TOOLS = {
    "xclip": "xclip",
    "xsel": "xsel",
    WAYLAND_CLIPBOARD: WAYLAND_COPY_TOOL,
}


class Session(str, Enum):
    WAYLAND = "wayland"
    X11 = "x11"


def detect_session(environ: Mapping[str, str]) -> Session:
    """
    Work out which display server the focused window lives on.

    Raises:
        ConfigurationError: Neither WAYLAND_DISPLAY nor DISPLAY is set.
    """
    if environ.get("WAYLAND_DISPLAY"):
        return Session.WAYLAND
    if not environ.get("DISPLAY"):
        raise ConfigurationError("no X11 DISPLAY found; run under an X11 session or set DISPLAY")
    return Session.X11


def copy_to_clipboard(text: str, backend: str) -> None:
    """Set the clipboard through pyperclip and read it back to confirm."""
    try:
        pyperclip.set_clipboard(backend)
        pyperclip.copy(text)
        pasted = pyperclip.paste()
    except pyperclip.PyperclipException as e:
        raise ProviderError(f"{backend}: {e}") from e
    if pasted.rstrip("\n") != text.rstrip("\n"):
        raise ProviderError(f"{backend}: clipboard contents did not match")


class XdotoolTyper(Provider[str]):
    """Types text as synthetic keystrokes with xdotool."""

    name = "xdotool type"
    requires = ("xdotool",)

    def run(self, payload: str) -> None:
        run_tool(["xdotool", "type", "--clearmodifiers", "--", payload], timeout=TOOL_TIMEOUT_S)


class PynputTyper(Provider[str]):
    """Types text through pynput's X11 keyboard controller."""

    name = "pynput"

    def run(self, payload: str) -> None:
        try:
            from pynput.keyboard import Controller as KeyboardController

            KeyboardController().type(payload)
        except Exception as e:
            raise ProviderError(f"pynput: {e}") from e


class _ClipboardProvider(Provider[str]):
    def __init__(self, backends: Sequence[str]) -> None:
        self._backends = tuple(backends)

    def backend(self) -> str | None:
        """First clipboard backend whose tool is installed."""
        for backend in self._backends:
            if tool_available(_CLIPBOARD_TOOLS[backend]):
                return backend
        return None

    def is_available(self) -> bool:
        return self.backend() is not None and super().is_available()

    def _copy(self, text: str) -> None:
        backend = self.backend()
        if backend is None:
            raise ProviderError(f"none of {', '.join(self._backends)} installed")
        copy_to_clipboard(text, backend)


class ClipboardPaste(_ClipboardProvider):
    """Copies text to the clipboard, then presses Ctrl+V in the focused window."""

    requires = ("xdotool",)

    def __init__(self, backends: Sequence[str] = X11_CLIPBOARDS) -> None:
        super().__init__(backends)
        self.name = f"{'/'.join(backends)} + xdotool paste"

    def run(self, payload: str) -> None:
        self._copy(payload)
        run_tool(["xdotool", "key", "--clearmodifiers", PASTE_KEYS], timeout=TOOL_TIMEOUT_S)


class ClipboardNotify(_ClipboardProvider):
    """Copies text to the clipboard and asks the user to paste it."""

    def __init__(self, backends: Sequence[str]) -> None:
        super().__init__(backends)
        self.name = f"{'/'.join(backends)} clipboard"

    def run(self, payload: str) -> None:
        self._copy(payload)
        notify(PASTE_MANUALLY)


def create_insertion_chain(session: Session) -> FallbackChain[str]:
    """
    Build the ordered list of insertion strategies for a session.

    Args:
        session: The detected display server.

    Returns:
        A chain whose first successful provider inserts the text.
    """
    if session == Session.WAYLAND:
        return FallbackChain(
            "insert",
            [XdotoolTyper(), ClipboardNotify([WAYLAND_CLIPBOARD])],
            "no Wayland typing tools found; install wl-clipboard (wl-copy) or xdotool",
        )

    return FallbackChain(
        "insert",
        [
            XdotoolTyper(),
            PynputTyper(),
            ClipboardPaste(X11_CLIPBOARDS),
            ClipboardNotify(X11_CLIPBOARDS),
            ClipboardNotify([WAYLAND_CLIPBOARD]),
        ],
        "no X11 typing tools found; install xdotool, xclip (or xsel), or wl-clipboard",
    )


def insert_text(text: str, environ: Mapping[str, str] | None = None) -> Provider[str]:
    """
    Insert text at the cursor of the focused application.

    Returns:
        The provider that inserted the text.

    Raises:
        ConfigurationError: No usable display session.
        MissingDependencyError: Every insertion strategy was unavailable or failed.
    """
    session = detect_session(os.environ if environ is None else environ)
    logger.info("Inserting %d characters (%s session)", len(text), session.value)
    return create_insertion_chain(session).run(text)
