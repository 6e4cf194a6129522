"""Bounded operator input helpers."""

from __future__ import annotations

from typing import Protocol

import click

DEFAULT_MAX_ATTEMPTS = 3
CONFIRMATION_LITERAL = "yes"


class Prompter(Protocol):  # pylint: disable=too-few-public-methods
    """Source of operator answers."""

    def ask(self, text: str) -> str: ...


class ClickPrompter:  # pylint: disable=too-few-public-methods
    """Prompter reading from the terminal through click.

    End of input and Ctrl-C at a prompt read as an empty answer, which every
    caller treats as a decline.
    """

    def ask(self, text: str) -> str:
        try:
            return click.prompt(text, default="", show_default=False)
        except (click.Abort, EOFError):
            click.echo("")
            return ""


def choose_index(
    prompter: Prompter,
    count: int,
    *,
    question: str = "Select a number",
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> int | None:
    """Ask for a 1-based choice among `count` options.

    Returns the zero-based index, or None once `max_attempts` invalid answers
    were given.
    """
    if count <= 0:
        return None
    for _ in range(max_attempts):
        answer = prompter.ask(f"{question} (1-{count})").strip()
        if answer.isascii() and answer.isdigit() and 1 <= int(answer) <= count:
            return int(answer) - 1
        click.echo(f"Invalid selection '{answer}'. Enter a number between 1 and {count}.")
    return None


def confirm_literal(
    prompter: Prompter,
    question: str,
    *,
    expected: str = CONFIRMATION_LITERAL,
) -> bool:
    """Return True only when the operator types `expected` exactly."""
    return prompter.ask(f"{question} Type '{expected}' to continue").strip() == expected
