from __future__ import annotations

import sys
from collections.abc import Mapping

import click
import typer


def is_interactive_terminal() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


class TyperPrompter:
    """Prompter reading operator answers from the terminal."""

    def choice(self, message: str, options: Mapping[str, str], default: str) -> str:
        answer: str = typer.prompt(
            message,
            default=default,
            type=click.Choice(list(options), case_sensitive=False),
            show_choices=False,
        )
        return answer.strip()

    def text(self, message: str, default: str) -> str:
        answer: str = typer.prompt(message, default=default)
        return answer.strip()
