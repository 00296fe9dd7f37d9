"""Runtime settings and the persisted config document."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import click

from job_queue.data.models import AppConfig, JobQueue, ProjectPool
from job_queue.data.store import JsonDocument
from job_queue.errors import ConfigError

logger = logging.getLogger(__name__)

APP_NAME = "job-queue"
CONFIG_FILE_NAME = "config.json"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(slots=True)
class Settings:
    """Environment-driven settings."""

    config_dir: Path = field(default_factory=lambda: Path(click.get_app_dir(APP_NAME)))
    editor: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with per-user defaults."""

        config_dir = os.getenv("JOB_QUEUE_CONFIG_DIR", "").strip()
        log_level = os.getenv("JOB_QUEUE_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(
                f"Invalid JOB_QUEUE_LOG_LEVEL: {log_level!r}. Expected one of {', '.join(LOG_LEVELS)}.",
            )
        return cls(
            config_dir=Path(config_dir) if config_dir else Path(click.get_app_dir(APP_NAME)),
            editor=os.getenv("JOB_QUEUE_EDITOR", "").strip() or None,
            log_level=log_level,
        )

    @property
    def config_path(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME


@dataclass(slots=True)
class ConfigOverrides:
    """Values supplied on the command line."""

    jobqueue: Path | None = None
    projectpool: Path | None = None
    editor: str | None = None

    def as_config_values(self) -> dict[str, str]:
        values = {
            "jobqueue": str(self.jobqueue.resolve()) if self.jobqueue else None,
            "projectpool": str(self.projectpool.resolve()) if self.projectpool else None,
            "editor": self.editor,
        }
        return {key: value for key, value in values.items() if value}


@dataclass(slots=True)
class EffectiveConfig:
    """Paths and editor command the session runs with."""

    jobqueue: Path
    projectpool: Path
    editor: str | None


def load_or_create_config(
    settings: Settings,
    overrides: ConfigOverrides,
    *,
    on_create: Callable[[str], None] | None = None,
) -> JsonDocument[AppConfig]:
    """Load `config.json`, creating it and empty data documents on first run."""

    notify = on_create or (lambda _message: None)
    config_path = settings.config_path
    settings.config_dir.mkdir(parents=True, exist_ok=True)
    config_dir = settings.config_dir.resolve()

    if not config_path.exists():
        notify(f"Creating config at '{config_path}'...")
        config = AppConfig(
            jobqueue=str(config_dir / "jobqueue.json"),
            projectpool=str(config_dir / "projectpool.json"),
        ).model_copy(update=overrides.as_config_values())
        _create_missing_document(Path(config.jobqueue), JobQueue(), notify)
        _create_missing_document(Path(config.projectpool), ProjectPool(), notify)
        JsonDocument.create(config_path, config)

    config_doc = JsonDocument.load(config_path, AppConfig)
    check_config(config_doc.data, config_path)
    return config_doc


def _create_missing_document(
    path: Path,
    data: JobQueue | ProjectPool,
    notify: Callable[[str], None],
) -> None:
    if path.exists():
        return
    notify(f"Creating '{path}'...")
    path.parent.mkdir(parents=True, exist_ok=True)
    JsonDocument.create(path, data)


def check_config(config: AppConfig, config_path: Path) -> None:
    """Fail when the config points at data files that do not exist."""

    for key in ("jobqueue", "projectpool"):
        value = getattr(config, key)
        if value is None:
            raise ConfigError(f"Config at '{config_path}'.\nMissing '{key}' path")
        if not Path(value).exists():
            raise ConfigError(f"Config at '{config_path}'.\nFile '{value}' in config does not exist")


def resolve_config(
    config_doc: JsonDocument[AppConfig],
    overrides: ConfigOverrides,
    *,
    confirm: Callable[[str], bool],
) -> bool:
    """Offer to store overrides that differ from the config; return True if it was rewritten."""

    changed = False
    for key, value in overrides.as_config_values().items():
        if getattr(config_doc.data, key) == value:
            continue
        if confirm(f"Supplied '{key}' is different than in config. Want to update config?"):
            setattr(config_doc.data, key, value)
            changed = True
    if changed:
        config_doc.sync()
        logger.info("Updated config at %s", config_doc.path)
    return changed


def effective_config(
    config: AppConfig,
    overrides: ConfigOverrides,
    settings: Settings,
) -> EffectiveConfig:
    """Command-line values win over the config file, which wins over the environment."""

    return EffectiveConfig(
        jobqueue=overrides.jobqueue or Path(config.jobqueue or ""),
        projectpool=overrides.projectpool or Path(config.projectpool or ""),
        editor=overrides.editor or config.editor or settings.editor,
    )
