"""Subprocess-based text editor launcher."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Protocol

from job_queue.errors import EditorLaunchError

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "notepad" if os.name == "nt" else "vi"
PATH_PLACEHOLDER = "{path}"


class Editor(Protocol):
    """Protocol implemented by editor launchers."""

    def edit(self, path: Path, initial_text: str) -> str:
        """Let the user edit `path` seeded with `initial_text`; return the final content."""


def resolve_editor_command(override: str | None = None) -> str:
    """Pick the editor: explicit override, then $VISUAL, then $EDITOR."""

    for candidate in (override, os.getenv("VISUAL"), os.getenv("EDITOR")):
        if candidate and candidate.strip():
            return candidate.strip()
    return DEFAULT_EDITOR


def build_editor_args(command: str, path: Path, *, os_name: str | None = None) -> list[str]:
    """Split the command and place the file path.

    The path replaces a `{path}` placeholder when present, otherwise it is
    appended as the last argument.
    """

    argv = shlex.split(command, posix=(os_name or os.name) != "nt")
    if not argv:
        raise EditorLaunchError("Editor command is empty.")
    if any(PATH_PLACEHOLDER in arg for arg in argv):
        return [arg.replace(PATH_PLACEHOLDER, str(path)) for arg in argv]
    return [*argv, str(path)]


class SubprocessEditor:
    """Run an editor command and block until it exits.

    The command has to wait for the file to be closed (`code --wait`,
    `subl -w`, terminal editors).
    """

    def __init__(self, command: str | None = None) -> None:
        self.command = resolve_editor_command(command)

    def edit(self, path: Path, initial_text: str) -> str:
        path.write_text(initial_text, "utf-8")
        run_args = build_editor_args(self.command, path)
        logger.debug("Launching editor: %s", run_args)
        try:
            completed = subprocess.run(run_args, check=False)  # noqa: S603
        except FileNotFoundError as error:
            raise EditorLaunchError(f"Editor command not found: {run_args[0]}") from error
        except OSError as error:
            raise EditorLaunchError(f"Editor failed to start: {error}") from error

        if completed.returncode != 0:
            logger.warning("Editor %s exited with code %d", run_args[0], completed.returncode)
        return path.read_text("utf-8")
