from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relplan.cli.commands._helpers import exit_code_for, print_release_error
from relplan.core.result import Err
from relplan.output.console import ConsoleProtocol, RichConsole
from relplan.services.release.library import Project, load_project


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    console: ConsoleProtocol


def build_context(directory: Path | None) -> CLIContext:
    console = RichConsole()
    root = (directory or Path.cwd()).expanduser()

    project = load_project(root)
    if isinstance(project, Err):
        print_release_error(console, project.error)
        raise typer.Exit(code=int(exit_code_for(project.error)))

    return CLIContext(project=project.value, console=console)
