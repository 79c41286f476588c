from __future__ import annotations

from pathlib import Path

import typer

from relplan.cli.commands._helpers import exit_on_error, exit_with_code
from relplan.cli.context import build_context
from relplan.cli.prompts import TyperPrompter, is_interactive_terminal
from relplan.core.errors import ErrorCode
from relplan.output.console import Style
from relplan.services.release.graph import dependency_lines
from relplan.services.release.plan_file import read_plan_file
from relplan.services.release.review import branching_label, print_plan, review_plan
from relplan.services.release.session import PlanSession
from relplan.services.release.version import parse_version


def plan(
    version: str = typer.Argument(..., help="Exact version to release the project as"),
    directory: Path | None = typer.Option(
        None, "--directory", "-d", help="Project root (defaults to the current directory)"
    ),
    branching: str | None = typer.Option(
        None, "--branching", "-b", help="Branching strategy: auto, major, minor or none"
    ),
    non_interactive: bool = typer.Option(
        False, "--non-interactive", help="Print the plan without prompting for changes"
    ),
) -> None:
    """Plan a release: which libraries get new tags and which are upgraded."""
    ctx = build_context(directory)
    target = exit_on_error(parse_version(version), ctx.console)

    ctx.console.info(f"Planning release for project {ctx.project.name} version {target.value}")
    session = PlanSession(
        project=ctx.project,
        version=target,
        branching=branching,
        console=ctx.console,
    )
    exit_on_error(session.build_initial_plan(), ctx.console)

    interactive = not non_interactive and is_interactive_terminal()
    final = exit_on_error(
        review_plan(session, TyperPrompter(), interactive=interactive), ctx.console
    )

    new_tags = len(final.new_releases())
    ctx.console.success(f"release plan saved to {ctx.project.plan_path} ({new_tags} new tags)")


def show(
    directory: Path | None = typer.Option(
        None, "--directory", "-d", help="Project root (defaults to the current directory)"
    ),
) -> None:
    """Show the cached release plan."""
    ctx = build_context(directory)
    cached = exit_on_error(
        read_plan_file(path=ctx.project.plan_path, project=ctx.project), ctx.console
    )
    if cached is None:
        ctx.console.error(f"no release plan saved for {ctx.project.name}")
        ctx.console.print("hint: run `relplan plan VERSION` first", Style.DIM)
        exit_with_code(ErrorCode.USER_ERROR)

    session = PlanSession(
        project=ctx.project, version=cached.version, branching=None, console=ctx.console
    )
    exit_on_error(session.build_initial_plan(), ctx.console)
    ctx.console.header(f"{ctx.project.name} {cached.version.value}")
    ctx.console.print(f"branching ({branching_label(cached)})", Style.DIM)
    print_plan(ctx.console, session.plan_lines(), numbered=False)


def graph(
    directory: Path | None = typer.Option(
        None, "--directory", "-d", help="Project root (defaults to the current directory)"
    ),
) -> None:
    """Show the library dependency tree with its constraints."""
    ctx = build_context(directory)
    for line in exit_on_error(dependency_lines(ctx.project), ctx.console):
        ctx.console.print(line)
