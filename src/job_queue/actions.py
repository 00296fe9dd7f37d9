"""User-facing actions over the job queue and project pool."""

from __future__ import annotations

import logging
from collections.abc import Callable

from job_queue.console import Console, MenuChoice
from job_queue.data.models import (
    Job,
    JobQueue,
    Project,
    ProjectPool,
    placeholder_job,
    placeholder_project,
)
from job_queue.data.store import JsonDocument
from job_queue.editing import (
    AbortPrompt,
    Aborted,
    Deleted,
    EditChecks,
    Edited,
    Editor,
    EditOptions,
    PreparseVerdict,
    deletion_sentinel,
    edit_record,
)
from job_queue.errors import AbortError, DomainInvariantError
from job_queue.rules import (
    activate_project_if_referenced,
    filter_project_names,
    jobs_referencing,
    propagate_rename,
    reorder,
    validate_job_project_ref,
    validate_new_project_name,
    validate_project_rename,
)

logger = logging.getLogger(__name__)

ACTION_NAMES = (
    "dequeueJob",
    "enqueueJob",
    "editQueue",
    "addProject",
    "editProject",
)
ACTIONS_DEPENDENT_ON_JOBS = frozenset({"dequeueJob", "editQueue"})
ACTIONS_DEPENDENT_ON_PROJECTS = frozenset({"enqueueJob", "editProject"})

JOB_OPTIONS = EditOptions(error_head="Rejected job", scratch_prefix="jobqueue-job")
PROJECT_OPTIONS = EditOptions(error_head="Rejected project", scratch_prefix="jobqueue-project")


class ActionController:
    """Runs menu actions against the two documents."""

    def __init__(
        self,
        *,
        job_queue: JsonDocument[JobQueue],
        project_pool: JsonDocument[ProjectPool],
        console: Console,
        editor: Editor,
        abort_prompt: AbortPrompt,
    ) -> None:
        self.job_queue = job_queue
        self.project_pool = project_pool
        self.console = console
        self.editor = editor
        self.abort_prompt = abort_prompt
        self._actions: dict[str, Callable[[], None]] = {
            "dequeueJob": self.dequeue_job,
            "enqueueJob": self.enqueue_job,
            "editQueue": self.edit_queue,
            "addProject": self.add_project,
            "editProject": self.edit_project,
        }

    @property
    def queue(self) -> list[Job]:
        return self.job_queue.data.queue

    @property
    def pool(self) -> list[Project]:
        return self.project_pool.data.pool

    def menu_choices(self) -> list[MenuChoice]:
        choices: list[MenuChoice] = []
        for name in ACTION_NAMES:
            reason: str | None = None
            if name in ACTIONS_DEPENDENT_ON_JOBS and not self.queue:
                reason = "(Empty job queue)"
            elif name in ACTIONS_DEPENDENT_ON_PROJECTS and not self.pool:
                reason = "(Empty project pool)"
            choices.append(MenuChoice(name=name, disabled_reason=reason))
        return choices

    def run(self, name: str) -> None:
        logger.debug("Running action %s", name)
        self._actions[name]()

    # -- jobs -----------------------------------------------------------------

    def dequeue_job(self) -> None:
        if not self.queue:
            self.console.error("No jobs in queue.")
            return

        job = self.queue.pop(0)
        self.console.info("Opening job JSON in editor for editing.")
        self.console.info("Delete file contents to finish the job.")

        try:
            outcome = self._edit_job(job)
        except BaseException:
            self.queue.insert(0, job)
            raise

        if isinstance(outcome, Aborted):
            self.queue.insert(0, job)
            self.console.error(outcome.reason)
            return

        if isinstance(outcome, Edited):
            self.queue.insert(0, outcome.value)
            self.console.info("Job edited")
        else:
            self.console.success("Job completed and deleted")
        self.job_queue.sync()

    def enqueue_job(self) -> None:
        if not self.pool:
            self.console.error("No projects in pool to make job for.")
            return

        self.console.info("Opening job JSON in editor for editing.")
        try:
            outcome = self._edit_job(placeholder_job())
            if isinstance(outcome, Aborted):
                raise AbortError(outcome.reason)
            if isinstance(outcome, Deleted):
                raise AbortError("Enqueue aborted")
        except AbortError as error:
            self.console.error(str(error))
            return

        self.queue.append(outcome.value)
        self.job_queue.sync()
        self.console.success("Job enqueued")

    def edit_queue(self) -> None:
        if not self.queue:
            self.console.error("No jobs in queue.")
            return

        choices = self.console.reorder_and_flag(
            "Reorder queue and/or select jobs to edit",
            [f"[{job.project}]\t{job.name}" for job in self.queue],
        )
        reorder(self.queue, [choice.value for choice in choices])
        self.job_queue.sync()
        self.console.success("Queue reordered.")

        flagged = [job for job, choice in zip(self.queue, choices, strict=True) if choice.checked]
        if not flagged:
            return

        self.console.info("Opening selected jobs for editing.")
        self.console.info("Delete file contents to delete a job.")
        for position, job in enumerate(flagged):
            outcome = self._edit_job(job)
            if isinstance(outcome, Aborted):
                self.console.error(outcome.reason)
                remaining = position + 1 < len(flagged)
                if remaining and self.console.confirm("Abort all edits?"):
                    break
                continue

            index = _index_of(self.queue, job)
            if isinstance(outcome, Deleted):
                del self.queue[index]
                self.console.success(f"Job [{job.name}] deleted.")
            else:
                self.queue[index] = outcome.value
                self.console.success(f"Job [{outcome.value.name}] edited.")
            self.job_queue.sync()

    def _edit_job(self, job: Job) -> Edited[Job] | Deleted | Aborted:
        """Edit one job; a valid result re-activates the project it points at."""

        outcome = edit_record(
            Job,
            job,
            editor=self.editor,
            abort_prompt=self.abort_prompt,
            console=self.console,
            options=JOB_OPTIONS,
            checks=EditChecks(
                preparse=deletion_sentinel,
                postparse=lambda edited: validate_job_project_ref(edited, self.pool),
            ),
        )
        if isinstance(outcome, Edited) and activate_project_if_referenced(
            outcome.value,
            self.pool,
        ):
            logger.info("Project %s set active by job %s", outcome.value.project, outcome.value.name)
            self.project_pool.sync()
        return outcome

    # -- projects -------------------------------------------------------------

    def add_project(self) -> None:
        self.console.info("Opening project JSON in editor for editing.")
        try:
            outcome = edit_record(
                Project,
                placeholder_project(),
                editor=self.editor,
                abort_prompt=self.abort_prompt,
                console=self.console,
                options=PROJECT_OPTIONS,
                checks=EditChecks(
                    preparse=deletion_sentinel,
                    postparse=lambda edited: validate_new_project_name(
                        edited,
                        self.pool,
                        self.queue,
                    ),
                ),
            )
            if isinstance(outcome, Aborted):
                raise AbortError(outcome.reason)
            if isinstance(outcome, Deleted):
                raise AbortError("Add project aborted")
        except AbortError as error:
            self.console.error(str(error))
            return

        self.pool.append(outcome.value)
        self.project_pool.sync()
        self.console.success("Added new project")

    def edit_project(self) -> None:
        if not self.pool:
            self.console.error("No projects in pool.")
            return

        project_name = self.console.search(
            "Enter the name of the project to edit",
            lambda partial: filter_project_names(partial, self.pool),
        )
        index = next(
            (i for i, project in enumerate(self.pool) if project.name == project_name),
            None,
        )
        if index is None:
            raise ValueError(f"Invalid project name: {project_name!r}")
        project = self.pool.pop(index)

        self.console.info("Opening project JSON in editor for editing.")
        self.console.info("Delete file contents to delete the project.")

        try:
            outcome = self._edit_project(project)
        except BaseException:
            self.pool.insert(index, project)
            raise

        if isinstance(outcome, Aborted):
            self.pool.insert(index, project)
            self.console.error(outcome.reason)
            return

        if isinstance(outcome, Edited):
            self.pool.insert(index, outcome.value)
            self.console.success("Project edited")
        else:
            self.console.success("Project deleted")
        self.project_pool.sync()

    def _edit_project(self, project: Project) -> Edited[Project] | Deleted | Aborted:
        """Edit a project already taken out of the pool.

        Deleting is refused while queued jobs reference the project. A rename
        is offered to referencing jobs after the edit is accepted.
        """

        referencing = jobs_referencing(project.name, self.queue)

        def preparse(text: str) -> PreparseVerdict:
            verdict = deletion_sentinel(text)
            if verdict is PreparseVerdict.DELETE and referencing:
                raise DomainInvariantError(
                    "project can not be deleted: jobs in queue still reference project",
                )
            return verdict

        outcome = edit_record(
            Project,
            project,
            editor=self.editor,
            abort_prompt=self.abort_prompt,
            console=self.console,
            options=PROJECT_OPTIONS,
            checks=EditChecks(
                preparse=preparse,
                postparse=lambda edited: validate_project_rename(
                    project.name,
                    edited,
                    self.pool,
                    self.queue,
                ),
            ),
        )

        if isinstance(outcome, Edited) and outcome.value.name != project.name and referencing:
            new_name = outcome.value.name
            if self.console.confirm(
                f"You are changing this project's name to {new_name}. "
                "Would you like to rename the project entry in referencing jobs?",
            ):
                renamed = propagate_rename(project.name, new_name, referencing)
                self.job_queue.sync()
                logger.info("Renamed project %s to %s in %d job(s)", project.name, new_name, renamed)
        return outcome


def _index_of(items: list[Job], target: Job) -> int:
    for index, item in enumerate(items):
        if item is target:
            return index
    raise ValueError(f"Job {target.name!r} is no longer in the queue")
