"""Cross-entity rules between the job queue and the project pool."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from job_queue.data.models import Job, Project, ProjectStatus
from job_queue.errors import DomainInvariantError

T = TypeVar("T")


def has_project(name: str, pool: Sequence[Project]) -> bool:
    return any(project.name == name for project in pool)


def find_project(name: str, pool: Sequence[Project]) -> Project | None:
    for project in pool:
        if project.name == name:
            return project
    return None


def jobs_referencing(name: str, queue: Sequence[Job]) -> list[Job]:
    """Jobs whose `project` points at `name`."""

    return [job for job in queue if job.project == name]


def validate_job_project_ref(job: Job, pool: Sequence[Project]) -> None:
    """Raise unless `job.project` names a project in `pool`."""

    if not has_project(job.project, pool):
        raise DomainInvariantError(f"invalid project name: '{job.project}' not in project pool")


def validate_new_project_name(
    project: Project,
    pool: Sequence[Project],
    queue: Sequence[Job] = (),
) -> None:
    if has_project(project.name, pool):
        raise DomainInvariantError(f"project name '{project.name}' already exists in pool")
    _check_stays_active(project, jobs_referencing(project.name, queue))


def validate_project_rename(
    old_name: str,
    new_project: Project,
    pool: Sequence[Project],
    queue: Sequence[Job],
) -> None:
    """Check an edited project against the rest of the pool.

    `pool` must not contain the project being edited. A renamed project may
    not collide with another entry, and a project that queued jobs reference
    by its old or new name has to stay active.
    """

    renamed = new_project.name != old_name
    if renamed and has_project(new_project.name, pool):
        raise DomainInvariantError(f"new name '{new_project.name}' already exists in pool")
    referencing = jobs_referencing(old_name, queue)
    if renamed:
        referencing += jobs_referencing(new_project.name, queue)
    _check_stays_active(new_project, referencing)


def _check_stays_active(project: Project, referencing_jobs: Sequence[Job]) -> None:
    if referencing_jobs and project.status is not ProjectStatus.ACTIVE:
        raise DomainInvariantError(
            f"status can not be set to {project.status.value}: "
            "jobs in queue still reference project",
        )


def activate_project_if_referenced(job: Job, pool: Sequence[Project]) -> bool:
    """Mark the job's project active; return True when the pool changed."""

    project = find_project(job.project, pool)
    if project is None or project.status is ProjectStatus.ACTIVE:
        return False
    project.status = ProjectStatus.ACTIVE
    return True


def propagate_rename(old_name: str, new_name: str, referencing_jobs: Sequence[Job]) -> int:
    """Point jobs at the renamed project; return how many were rewritten."""

    renamed = 0
    for job in referencing_jobs:
        if job.project == old_name:
            job.project = new_name
            renamed += 1
    return renamed


def reorder(items: list[T], new_indices: Sequence[int]) -> None:
    """Reorder in place so that `items[i]` becomes the old `items[new_indices[i]]`."""

    if len(items) != len(new_indices):
        raise ValueError("Indices array must be same length as target array")
    if sorted(new_indices) != list(range(len(items))):
        raise ValueError(f"Indices {list(new_indices)!r} are not a permutation")

    original = list(items)
    for position, original_index in enumerate(new_indices):
        items[position] = original[original_index]


def matches_partial_name(partial: str, name: str) -> bool:
    """Case-insensitive check that every typed character occurs in `name`."""

    return set(partial.lower()) <= set(name.lower())


def filter_project_names(partial: str, pool: Sequence[Project]) -> list[str]:
    names = [project.name for project in pool]
    if not partial:
        return names
    return [name for name in names if matches_partial_name(partial, name)]
