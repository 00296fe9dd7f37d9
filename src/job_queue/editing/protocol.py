"""Edit-in-editor retry loop: open, allow abort, reparse, validate."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel

from job_queue.data.store import decode_record, dump_json, encode_record
from job_queue.editing.abort_prompt import AbortPrompt
from job_queue.editing.editor import Editor
from job_queue.errors import DomainInvariantError, SchemaValidationError

if TYPE_CHECKING:
    from job_queue.console import Console

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

USER_ABORT_REASON = "User aborted action"


class PreparseVerdict(str, Enum):
    """What the raw editor text means before it is parsed."""

    CONTINUE = "continue"
    DELETE = "delete"


@dataclass(slots=True)
class Edited(Generic[ModelT]):
    """The user submitted a valid record."""

    value: ModelT


@dataclass(slots=True)
class Deleted:
    """The user emptied the buffer to delete the record."""


@dataclass(slots=True)
class Aborted:
    """The user cancelled the edit."""

    reason: str = USER_ABORT_REASON


EditOutcome = Edited[Any] | Deleted | Aborted


@dataclass(slots=True)
class EditOptions:
    """Presentation knobs for one edit."""

    error_head: str = "Rejected record"
    scratch_prefix: str = "jobqueue-record"


@dataclass(slots=True)
class EditChecks:
    """Hooks run on the raw text and on the parsed record.

    Both may raise `DomainInvariantError` to send the user back to the editor.
    """

    preparse: Callable[[str], PreparseVerdict] | None = None
    postparse: Callable[[Any], None] | None = None


def deletion_sentinel(text: str) -> PreparseVerdict:
    """Empty or whitespace-only content means "delete this record"."""

    return PreparseVerdict.DELETE if not text.strip() else PreparseVerdict.CONTINUE


def edit_record(  # noqa: PLR0913
    model: type[ModelT],
    current: ModelT,
    *,
    editor: Editor,
    abort_prompt: AbortPrompt,
    console: Console,
    options: EditOptions | None = None,
    checks: EditChecks | None = None,
) -> Edited[ModelT] | Deleted | Aborted:
    """Run the edit loop until the user submits, deletes, or aborts.

    Every rejection reopens the editor with the rejected text so no edit is
    lost. The scratch file is removed on every exit path.
    """

    options = options or EditOptions()
    checks = checks or EditChecks()
    text = dump_json(encode_record(current))

    fd, scratch_name = tempfile.mkstemp(prefix=options.scratch_prefix, suffix=".json")
    os.close(fd)
    scratch_path = Path(scratch_name)
    logger.debug("Created scratch file %s", scratch_path)

    try:
        while True:
            edited = race_editor_against_abort(editor, abort_prompt, scratch_path, text)
            if edited is None:
                return Aborted()
            text = edited

            if checks.preparse is not None:
                try:
                    verdict = checks.preparse(edited)
                except DomainInvariantError as error:
                    console.reject(options.error_head, str(error))
                    continue
                if verdict is PreparseVerdict.DELETE:
                    return Deleted()

            try:
                value = decode_record(model, edited)
            except SchemaValidationError as error:
                console.reject(options.error_head, f"JSON invalid: {error}")
                continue

            if checks.postparse is not None:
                try:
                    checks.postparse(value)
                except DomainInvariantError as error:
                    console.reject(options.error_head, str(error))
                    continue

            return Edited(value)
    finally:
        scratch_path.unlink(missing_ok=True)
        logger.debug("Removed scratch file %s", scratch_path)


def race_editor_against_abort(
    editor: Editor,
    abort_prompt: AbortPrompt,
    path: Path,
    text: str,
) -> str | None:
    """Return the edited text, or None when the abort prompt wins.

    The prompt is always finished before this returns, so the terminal is
    back in its normal mode. The editor is never killed: when the prompt wins
    its daemon thread is left to finish on its own and does not hold up exit.
    """

    cancelled = threading.Event()
    editor_future = _submit_daemon(editor.edit, path, text)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="edit-race-abort")
    try:
        abort_future = executor.submit(abort_prompt.wait, cancelled)
        try:
            done, _ = wait([editor_future, abort_future], return_when=FIRST_COMPLETED)
            if abort_future in done and abort_future.result():
                logger.debug("Abort prompt won the race for %s", path)
                return None
            edited = editor_future.result()
            logger.debug("Editor finished for %s", path)
            return edited
        finally:
            cancelled.set()
            wait([abort_future])
    finally:
        executor.shutdown(wait=True)


def _submit_daemon(fn: Callable[..., str], *args: Any) -> Future[str]:
    """Run `fn` on a daemon thread; interpreter exit does not wait for it."""

    future: Future[str] = Future()

    def run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args))
        except BaseException as error:  # noqa: BLE001
            future.set_exception(error)

    threading.Thread(target=run, name="edit-race-editor", daemon=True).start()
    return future
