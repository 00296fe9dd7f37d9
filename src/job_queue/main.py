"""CLI entrypoint for job-queue."""

from __future__ import annotations

import logging
from pathlib import Path

import rich_click as click

from job_queue import __version__
from job_queue.actions import ActionController
from job_queue.config import (
    LOG_LEVELS,
    ConfigOverrides,
    Settings,
    effective_config,
    load_or_create_config,
    resolve_config,
)
from job_queue.console import Console
from job_queue.data.models import JobQueue, ProjectPool
from job_queue.data.store import JsonDocument
from job_queue.editing import KeystrokeAbortPrompt, SubprocessEditor
from job_queue.errors import UserExit

click.rich_click.USE_MARKDOWN = True
logger = logging.getLogger(__name__)


@click.command()
@click.version_option(version=__version__, prog_name="job-queue")
@click.option(
    "--jobqueue",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Path to jobqueue.json. Overrides the config for this run.",
)
@click.option(
    "--projectpool",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Path to projectpool.json. Overrides the config for this run.",
)
@click.option(
    "--editor",
    default=None,
    help=(
        "Command to run the editor. It is run like `<editor> /some/data.json`, "
        "so make sure it waits until the file is closed."
    ),
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level for diagnostics on stderr. Defaults to JOB_QUEUE_LOG_LEVEL or WARNING.",
)
def job_queue(
    jobqueue: Path | None,
    projectpool: Path | None,
    editor: str | None,
    log_level: str | None,
) -> None:
    """Manage a job queue and project pool by editing records in your editor."""

    console = Console()
    try:
        settings = Settings.from_env()
        _configure_logging(log_level or settings.log_level)
        console.banner()
        controller = _build_controller(
            settings,
            ConfigOverrides(jobqueue=jobqueue, projectpool=projectpool, editor=editor),
            console,
        )
        run_menu(controller, console)
    except click.ClickException:
        raise
    except (click.Abort, KeyboardInterrupt, EOFError):
        logger.debug("Interrupted during startup")
    except Exception as error:  # noqa: BLE001
        logger.debug("Fatal error", exc_info=True)
        raise click.ClickException(str(error)) from error


def _build_controller(
    settings: Settings,
    overrides: ConfigOverrides,
    console: Console,
) -> ActionController:
    config_doc = load_or_create_config(settings, overrides, on_create=console.info)
    effective = effective_config(config_doc.data, overrides, settings)
    job_queue_doc = JsonDocument.load(effective.jobqueue, JobQueue)
    project_pool_doc = JsonDocument.load(effective.projectpool, ProjectPool)
    resolve_config(config_doc, overrides, confirm=console.confirm)
    console.blank()

    return ActionController(
        job_queue=job_queue_doc,
        project_pool=project_pool_doc,
        console=console,
        editor=SubprocessEditor(effective.editor),
        abort_prompt=KeystrokeAbortPrompt(),
    )


def run_menu(controller: ActionController, console: Console) -> None:
    """Prompt for actions until the user quits or interrupts."""

    try:
        while True:
            action = console.select_action(controller.menu_choices())
            controller.run(action)
            console.blank()
    except (UserExit, KeyboardInterrupt, EOFError, click.Abort):
        logger.debug("Leaving main menu")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":  # pragma: no cover
    job_queue()
