"""Schemas for the job queue, project pool, and config documents."""

from __future__ import annotations

from enum import Enum
from typing import Annotated
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ProjectStatus(str, Enum):
    """Project lifecycle states."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETE = "complete"


class Job(BaseModel):
    """One queued unit of work referencing a project by name."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: NonEmptyStr
    # The on-disk key keeps its historical spelling.
    objectives: list[NonEmptyStr] = Field(alias="objectivies")
    updates: str | None = None
    project: NonEmptyStr


class Project(BaseModel):
    """Named grouping of jobs with a lifecycle status."""

    model_config = ConfigDict(extra="ignore")

    name: NonEmptyStr
    description: str | None = None
    repo: str | None = None
    status: ProjectStatus

    @field_validator("repo")
    @classmethod
    def _check_repo_url(cls, value: str | None) -> str | None:
        if value is None:
            return value
        parsed = urlparse(value)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid repo URL: {value!r}. Expected an absolute URL.")
        return value


class JobQueue(BaseModel):
    """Top-level job document."""

    model_config = ConfigDict(extra="ignore")

    queue: list[Job] = Field(default_factory=list)


class ProjectPool(BaseModel):
    """Top-level project document."""

    model_config = ConfigDict(extra="ignore")

    pool: list[Project] = Field(default_factory=list)


class AppConfig(BaseModel):
    """Persisted config document."""

    model_config = ConfigDict(extra="ignore")

    jobqueue: NonEmptyStr | None = None
    projectpool: NonEmptyStr | None = None
    editor: NonEmptyStr | None = None


def placeholder_job() -> Job:
    """Seed shown in the editor when enqueuing a new job."""

    return Job(
        name="[placeholder]",
        objectives=["Put the thing in the thing.", "Make sure that thing works."],
        project="[some-project]",
        updates="Put notes here.",
    )


def placeholder_project() -> Project:
    """Seed shown in the editor when adding a new project."""

    return Project(
        name="[some-project]",
        description="This is a placeholder project.",
        repo="https://some.project.com/project",
        status=ProjectStatus.INACTIVE,
    )
