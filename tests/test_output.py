"""Tests for the text insertion module."""

from __future__ import annotations

from typing import Iterable
from unittest.mock import MagicMock, patch

import pyperclip
import pytest

from dictate_toggle.errors import ConfigurationError, MissingDependencyError, ProviderError
from dictate_toggle.output import (
    PASTE_MANUALLY,
    PynputTyper,
    Session,
    detect_session,
    insert_text,
)


class FakeTools:
    """Stands in for external tools: records calls and fails the listed ones."""

    def __init__(self, installed: Iterable[str], failing: Iterable[str] = ()) -> None:
        self.installed = set(installed)
        self.failing = set(failing)
        self.calls: list[list[str]] = []
        self.clipboard = ""
        self.backend = ""

    def available(self, name: str) -> bool:
        return name in self.installed

    def run(self, argv, input_data=None, timeout=None) -> None:
        self.calls.append(list(argv))
        if argv[0] in self.failing or " ".join(argv[:2]) in self.failing:
            raise ProviderError(f"{argv[0]} exited with status 1")

    def set_clipboard(self, backend: str) -> None:
        self.backend = backend

    def copy(self, text: str) -> None:
        self.calls.append([f"copy:{self.backend}"])
        if self.backend in self.failing:
            return
        self.clipboard = text

    def paste(self) -> str:
        return self.clipboard


@pytest.fixture
def tools():
    """Install a FakeTools in place of PATH lookups, subprocesses and pyperclip."""
    patches = []

    def _install(installed: Iterable[str], failing: Iterable[str] = ()) -> FakeTools:
        fake = FakeTools(installed, failing)
        for target, replacement in (
            ("dictate_toggle.providers.tool_available", fake.available),
            ("dictate_toggle.output.tool_available", fake.available),
            ("dictate_toggle.output.run_tool", fake.run),
            ("dictate_toggle.output.pyperclip.set_clipboard", fake.set_clipboard),
            ("dictate_toggle.output.pyperclip.copy", fake.copy),
            ("dictate_toggle.output.pyperclip.paste", fake.paste),
        ):
            p = patch(target, replacement)
            p.start()
            patches.append(p)
        return fake

    yield _install

    for p in reversed(patches):
        p.stop()


@pytest.fixture
def notify_mock():
    with patch("dictate_toggle.output.notify") as mock_notify:
        yield mock_notify


@pytest.fixture
def no_pynput():
    with patch.object(PynputTyper, "run", side_effect=ProviderError("pynput: no display")) as m:
        yield m


WAYLAND_ENV = {"WAYLAND_DISPLAY": "wayland-0", "DISPLAY": ":0"}
X11_ENV = {"DISPLAY": ":0"}


class TestDetectSession:
    def test_wayland_takes_precedence(self) -> None:
        assert detect_session(WAYLAND_ENV) == Session.WAYLAND

    def test_x11(self) -> None:
        assert detect_session(X11_ENV) == Session.X11

    def test_no_display(self) -> None:
        with pytest.raises(ConfigurationError, match="DISPLAY"):
            detect_session({})


class TestWayland:
    def test_types_directly(self, tools, notify_mock: MagicMock) -> None:
        fake = tools({"xdotool", "wl-copy"})
        insert_text("hello", WAYLAND_ENV)

        assert fake.calls == [["xdotool", "type", "--clearmodifiers", "--", "hello"]]
        notify_mock.assert_not_called()

    def test_clipboard_only_after_typing_fails(self, tools, notify_mock: MagicMock) -> None:
        fake = tools({"xdotool", "wl-copy"}, failing={"xdotool"})
        insert_text("hello", WAYLAND_ENV)

        assert fake.calls[0][0] == "xdotool"
        assert fake.calls[1] == ["copy:wl-clipboard"]
        assert fake.clipboard == "hello"
        notify_mock.assert_called_once_with(PASTE_MANUALLY)

    def test_clipboard_when_xdotool_missing(self, tools, notify_mock: MagicMock) -> None:
        fake = tools({"wl-copy"})
        insert_text("hello", WAYLAND_ENV)
        assert fake.calls == [["copy:wl-clipboard"]]

    def test_nothing_installed(self, tools, notify_mock: MagicMock) -> None:
        tools(set())
        with pytest.raises(MissingDependencyError, match="wl-clipboard"):
            insert_text("hello", WAYLAND_ENV)


class TestX11:
    def test_no_display_fails_before_any_tool(self, tools) -> None:
        fake = tools({"xdotool", "xclip", "wl-copy"})
        with pytest.raises(ConfigurationError):
            insert_text("hello", {})
        assert fake.calls == []

    def test_types_directly(self, tools, no_pynput) -> None:
        fake = tools({"xdotool", "xclip"})
        insert_text("hello", X11_ENV)
        assert fake.calls == [["xdotool", "type", "--clearmodifiers", "--", "hello"]]
        no_pynput.assert_not_called()

    def test_pynput_after_xdotool(self, tools) -> None:
        fake = tools({"xclip"})
        with patch.object(PynputTyper, "run") as pynput_run:
            insert_text("hello", X11_ENV)
        pynput_run.assert_called_once_with("hello")
        assert fake.calls == []

    def test_clipboard_then_paste(self, tools, no_pynput, notify_mock: MagicMock) -> None:
        fake = tools({"xdotool", "xclip"}, failing={"xdotool type"})
        insert_text("hello", X11_ENV)

        assert fake.calls[1:] == [
            ["copy:xclip"],
            ["xdotool", "key", "--clearmodifiers", "ctrl+v"],
        ]
        notify_mock.assert_not_called()

    def test_xsel_when_no_xclip(self, tools, no_pynput, notify_mock: MagicMock) -> None:
        fake = tools({"xdotool", "xsel"}, failing={"xdotool type"})
        insert_text("hello", X11_ENV)
        assert ["copy:xsel"] in fake.calls

    def test_clipboard_and_notify_when_paste_fails(
        self, tools, no_pynput, notify_mock: MagicMock
    ) -> None:
        fake = tools({"xdotool", "xclip"}, failing={"xdotool"})
        insert_text("hello", X11_ENV)

        assert fake.clipboard == "hello"
        notify_mock.assert_called_once_with(PASTE_MANUALLY)

    def test_wayland_clipboard_last(self, tools, no_pynput, notify_mock: MagicMock) -> None:
        fake = tools({"xclip", "wl-copy"}, failing={"xclip"})
        insert_text("hello", X11_ENV)

        assert fake.calls == [["copy:xclip"], ["copy:wl-clipboard"]]
        notify_mock.assert_called_once_with(PASTE_MANUALLY)

    def test_all_fail(self, tools, no_pynput) -> None:
        tools(set())
        with pytest.raises(MissingDependencyError, match="xdotool, xclip"):
            insert_text("hello", X11_ENV)


class TestClipboardErrors:
    def test_pyperclip_exception_is_provider_failure(self, tools, no_pynput) -> None:
        tools({"xclip"})
        with patch(
            "dictate_toggle.output.pyperclip.copy",
            side_effect=pyperclip.PyperclipException("no clipboard"),
        ):
            with pytest.raises(MissingDependencyError, match="no clipboard"):
                insert_text("hello", X11_ENV)
