"""External-editor round trip with abort support and validation retries."""

from job_queue.editing.abort_prompt import AbortPrompt, KeystrokeAbortPrompt
from job_queue.editing.editor import Editor, SubprocessEditor, resolve_editor_command
from job_queue.editing.protocol import (
    Aborted,
    Deleted,
    EditChecks,
    Edited,
    EditOptions,
    EditOutcome,
    PreparseVerdict,
    deletion_sentinel,
    edit_record,
    race_editor_against_abort,
)

__all__ = [
    "AbortPrompt",
    "Aborted",
    "Deleted",
    "EditChecks",
    "EditOptions",
    "EditOutcome",
    "Edited",
    "Editor",
    "KeystrokeAbortPrompt",
    "PreparseVerdict",
    "SubprocessEditor",
    "deletion_sentinel",
    "edit_record",
    "race_editor_against_abort",
    "resolve_editor_command",
]
