"""Terminal output and interactive prompts."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass

import click

from job_queue.errors import UserExit

BANNER = r"""
     _       _      ___
    | | ___ | |__  / _ \ _   _  ___ _   _  ___
 _  | |/ _ \| '_ \| | | | | | |/ _ \ | | |/ _ \
| |_| | (_) | |_) | |_| | |_| |  __/ |_| |  __/
 \___/ \___/|_.__/ \__\_\\__,_|\___|\__,_|\___|
"""

QUIT_CHOICE = "quit"
EDIT_MARK = "*"


@dataclass(slots=True)
class MenuChoice:
    """One main-menu entry; disabled entries carry the reason."""

    name: str
    disabled_reason: str | None = None


@dataclass(slots=True)
class ReorderChoice:
    """One row of the reorder prompt, in its new position."""

    value: int
    checked: bool = False


class Console:
    """Prints status lines and asks the user questions."""

    def banner(self) -> None:
        if sys.stdout.isatty():
            click.clear()
        click.secho(BANNER, fg="yellow")

    def blank(self) -> None:
        click.echo()

    def info(self, message: str) -> None:
        click.echo(f"{click.style('[i]', fg='blue')} {message}")

    def success(self, message: str) -> None:
        click.echo(f"{click.style('✔', fg='green')} {message}")

    def error(self, message: str) -> None:
        click.echo(f"{click.style('[e]', fg='red')} {message}")

    def reject(self, head: str, message: str) -> None:
        click.echo(f"{click.style(f'{head}:', fg='red')} {message}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return click.confirm(message, default=default)

    def select_action(self, choices: list[MenuChoice]) -> str:
        """Numbered menu; the last entry quits and raises `UserExit`."""

        click.echo("Select action")
        for number, choice in enumerate(choices, start=1):
            if choice.disabled_reason:
                click.secho(f"  {number}) {choice.name} {choice.disabled_reason}", dim=True)
            else:
                click.echo(f"  {number}) {choice.name}")
        quit_number = len(choices) + 1
        click.echo(f"  {quit_number}) {QUIT_CHOICE}")

        while True:
            number = click.prompt("Action", type=click.IntRange(1, quit_number))
            if number == quit_number:
                raise UserExit
            choice = choices[number - 1]
            if choice.disabled_reason:
                self.error(f"{choice.name} is unavailable {choice.disabled_reason}")
                continue
            return choice.name

    def search(self, message: str, source: Callable[[str], list[str]]) -> str:
        """Narrow `source(typed)` down to one name, asking again until it is unique."""

        while True:
            typed = click.prompt(message, default="", show_default=False).strip()
            matches = source(typed)
            if typed in matches:
                return typed
            if len(matches) == 1:
                return matches[0]
            if not matches:
                self.error(f"No match for '{typed}'")
                continue

            for number, name in enumerate(matches, start=1):
                click.echo(f"  {number}) {name}")
            number = click.prompt(
                "Pick a number (0 to search again)",
                type=click.IntRange(0, len(matches)),
            )
            if number:
                return matches[number - 1]

    def reorder_and_flag(self, message: str, labels: list[str]) -> list[ReorderChoice]:
        """Ask for a new order of `labels` and which rows to edit.

        The answer lists current row numbers in the new order, each optionally
        followed by `*` to flag it for editing, e.g. `2 0* 1`. A blank answer
        keeps the order and flags nothing.
        """

        click.echo(message)
        for index, label in enumerate(labels):
            click.echo(f"  {index}) {label}")

        while True:
            answer = click.prompt(
                f"New order (row numbers, `{EDIT_MARK}` marks rows to edit)",
                default="",
                show_default=False,
            )
            try:
                return parse_reorder_answer(answer, len(labels))
            except ValueError as error:
                self.error(str(error))


def parse_reorder_answer(answer: str, size: int) -> list[ReorderChoice]:
    """Parse `2 0* 1` style answers into reorder choices."""

    tokens = answer.replace(",", " ").split()
    if not tokens:
        return [ReorderChoice(value=index) for index in range(size)]

    choices: list[ReorderChoice] = []
    for token in tokens:
        checked = token.endswith(EDIT_MARK)
        raw = token.rstrip(EDIT_MARK)
        try:
            value = int(raw)
        except ValueError as error:
            raise ValueError(f"Not a row number: {token!r}") from error
        choices.append(ReorderChoice(value=value, checked=checked))

    if sorted(choice.value for choice in choices) != list(range(size)):
        raise ValueError(f"List every row number from 0 to {size - 1} exactly once")
    return choices
