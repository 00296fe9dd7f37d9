"""Shared test fixtures."""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from job_queue.actions import ActionController
from job_queue.console import Console, ReorderChoice
from job_queue.data.models import JobQueue, ProjectPool
from job_queue.data.store import JsonDocument

ABORT = object()
"""Script entry: the user presses `y` while the editor is still open."""


def as_json(payload: Any) -> str:
    return json.dumps(payload, indent=2) + "\n"


class ScriptedSession:
    """Editor and abort prompt driven by one script entry per edit round.

    An entry is the text the user leaves in the buffer, a callable mapping the
    seeded text to the result, or `ABORT`.
    """

    def __init__(self, *script: str | Callable[[str], str] | object) -> None:
        self.script = list(script)
        self.seeds: list[str] = []
        self.paths: list[Path] = []
        self._edits = 0
        self._waits = 0

    @property
    def rounds(self) -> int:
        return self._edits

    def edit(self, path: Path, initial_text: str) -> str:
        response = self.script[self._edits]
        self.seeds.append(initial_text)
        self.paths.append(path)
        self._edits += 1
        if response is ABORT:
            time.sleep(0.5)
            return initial_text
        if callable(response):
            return response(initial_text)
        return response

    def wait(self, cancelled: threading.Event) -> bool:
        response = self.script[self._waits]
        self._waits += 1
        if response is ABORT:
            # Let the editor open first so the round is recorded.
            deadline = time.monotonic() + 5
            while self._edits < self._waits and time.monotonic() < deadline:
                time.sleep(0.01)
            return True
        cancelled.wait(timeout=5)
        return False


class RecordingConsole(Console):
    """Console that records output and answers prompts from scripts."""

    def __init__(
        self,
        *,
        confirms: list[bool] | None = None,
        search_answer: str | None = None,
        reorder_answer: list[ReorderChoice] | None = None,
    ) -> None:
        self.lines: list[tuple[str, str]] = []
        self.confirms = list(confirms or [])
        self.confirm_questions: list[str] = []
        self.search_answer = search_answer
        self.reorder_answer = reorder_answer
        self.search_results: list[str] = []

    def info(self, message: str) -> None:
        self.lines.append(("info", message))

    def success(self, message: str) -> None:
        self.lines.append(("success", message))

    def error(self, message: str) -> None:
        self.lines.append(("error", message))

    def reject(self, head: str, message: str) -> None:
        self.lines.append(("reject", f"{head}: {message}"))

    def confirm(self, message: str, *, default: bool = False) -> bool:
        self.confirm_questions.append(message)
        return self.confirms.pop(0)

    def search(self, message: str, source: Callable[[str], list[str]]) -> str:
        assert self.search_answer is not None
        self.search_results = source(self.search_answer)
        return self.search_answer

    def reorder_and_flag(self, message: str, labels: list[str]) -> list[ReorderChoice]:
        assert self.reorder_answer is not None
        return self.reorder_answer

    def messages(self, kind: str) -> list[str]:
        return [message for line_kind, message in self.lines if line_kind == kind]


def write_documents(
    tmp_path: Path,
    *,
    queue: list[dict[str, Any]] | None = None,
    pool: list[dict[str, Any]] | None = None,
) -> tuple[Path, Path]:
    jobqueue_path = tmp_path / "jobqueue.json"
    projectpool_path = tmp_path / "projectpool.json"
    jobqueue_path.write_text(as_json({"queue": queue or []}), "utf-8")
    projectpool_path.write_text(as_json({"pool": pool or []}), "utf-8")
    return jobqueue_path, projectpool_path


def make_controller(
    tmp_path: Path,
    session: ScriptedSession,
    console: RecordingConsole | None = None,
    *,
    queue: list[dict[str, Any]] | None = None,
    pool: list[dict[str, Any]] | None = None,
) -> ActionController:
    jobqueue_path, projectpool_path = write_documents(tmp_path, queue=queue, pool=pool)
    return ActionController(
        job_queue=JsonDocument.load(jobqueue_path, JobQueue),
        project_pool=JsonDocument.load(projectpool_path, ProjectPool),
        console=console or RecordingConsole(),
        editor=session,
        abort_prompt=session,
    )


@pytest.fixture()
def console() -> RecordingConsole:
    return RecordingConsole()
