"""Single-keystroke abort prompt raced against the editor."""

from __future__ import annotations

import os
import sys
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, TextIO

import click

ABORT_KEYS = frozenset({"y", "Y"})


class AbortPrompt(Protocol):
    """Protocol implemented by abort prompts."""

    def wait(self, cancelled: threading.Event) -> bool:
        """Block until the user aborts (True) or `cancelled` is set (False)."""


class KeystrokeAbortPrompt:
    """Poll the terminal for `y` until the edit finishes."""

    def __init__(
        self,
        *,
        message: str = "Type `y` to abort...",
        poll_interval_seconds: float = 0.1,
        stream: TextIO | None = None,
    ) -> None:
        self.message = message
        self.poll_interval_seconds = poll_interval_seconds
        self._stream = stream

    def wait(self, cancelled: threading.Event) -> bool:
        stream = self._stream or sys.stdin
        click.echo(self.message)
        try:
            if not _is_interactive(stream):
                cancelled.wait()
                return False
            with _cbreak(stream):
                while not cancelled.is_set():
                    key = _read_key(stream, self.poll_interval_seconds)
                    if key in ABORT_KEYS:
                        return True
            return False
        finally:
            _clear_prompt_line()


def _is_interactive(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except ValueError:
        return False


@contextmanager
def _cbreak(stream: TextIO) -> Iterator[None]:
    if os.name == "nt":
        yield
        return

    import termios  # noqa: PLC0415
    import tty  # noqa: PLC0415

    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def _read_key(stream: TextIO, timeout: float) -> str | None:
    if os.name == "nt":
        import msvcrt  # noqa: PLC0415

        if msvcrt.kbhit():
            return msvcrt.getwch()
        time.sleep(timeout)
        return None

    import select  # noqa: PLC0415

    ready, _, _ = select.select([stream], [], [], timeout)
    if not ready:
        return None
    return os.read(stream.fileno(), 1).decode("utf-8", errors="ignore")


def _clear_prompt_line() -> None:
    if sys.stdout.isatty():
        click.echo("\x1b[1A\x1b[2K", nl=False)
