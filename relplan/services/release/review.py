"""Interactive review of a release plan.

The operator sees the whole plan, then either accepts it, changes the
branching strategy, or picks a node and types a replacement version. After
each change the full plan is shown again, until "continue" is chosen.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from relplan.core.result import Err, Ok, Result
from relplan.output.console import ConsoleProtocol, Style
from relplan.services.release.config import BRANCHING_OPTIONS, DEFAULT_BRANCHING
from relplan.services.release.errors import ReleaseError
from relplan.services.release.plan import LibraryRelease
from relplan.services.release.session import PlanLine, PlanSession

CONTINUE = "continue"
BRANCHING = "branching"

PLAN_MESSAGE = "The below release plan has been generated for this project"

# Edit errors the operator can fix by typing another version.
_RECOVERABLE = frozenset({"invalid_version", "upgrade_only", "no_matching_tag", "dependency_cycle"})


class Prompter(Protocol):
    """Blocking operator input.

    Options are shown by the caller before asking; implementations only
    collect the answer.
    """

    def choice(self, message: str, options: Mapping[str, str], default: str) -> str:
        """Return one of the option keys."""
        ...

    def text(self, message: str, default: str) -> str: ...


def branching_label(plan: LibraryRelease) -> str:
    """Branching shown to the operator; a plan saved without one uses the default."""
    return plan.branching or DEFAULT_BRANCHING


def print_plan(console: ConsoleProtocol, lines: list[PlanLine], *, numbered: bool) -> None:
    for line in lines:
        style = Style.NEW if line.node.is_new_release else Style.EXISTING
        prefix = f"[{line.key}] " if numbered else ""
        console.print(f"{prefix}{line.text}", style)


def review_plan(
    session: PlanSession,
    prompter: Prompter,
    *,
    interactive: bool,
) -> Result[LibraryRelease, ReleaseError]:
    """Let the operator confirm or amend the plan; returns the final plan."""
    console = session.console

    if not interactive:
        console.header(PLAN_MESSAGE)
        console.print(f"branching ({branching_label(session.plan)})", Style.DIM)
        print_plan(console, session.plan_lines(), numbered=False)
        return Ok(session.plan)

    while True:
        lines = session.plan_lines()
        console.header(PLAN_MESSAGE)
        console.print(f"[{CONTINUE}] accept this plan", Style.BOLD)
        console.print(
            f"[{BRANCHING}] modify branching strategy ({branching_label(session.plan)})", Style.BOLD
        )
        print_plan(console, lines, numbered=True)

        options: dict[str, str] = {
            CONTINUE: "continue",
            BRANCHING: "modify branching strategy",
        }
        options.update({line.key: line.node.name for line in lines})
        selected = prompter.choice(
            "Please confirm any manual changes, or pick a library number to edit its version",
            options,
            CONTINUE,
        )

        if selected == CONTINUE:
            return Ok(session.plan)

        if selected == BRANCHING:
            changed = _review_branching(session, prompter)
        else:
            line = next((ln for ln in lines if ln.key == selected), None)
            if line is None:
                console.error(f"unknown selection: {selected}")
                continue
            changed = _review_library_version(session, prompter, line.node)

        if isinstance(changed, Err):
            return changed


def _review_branching(session: PlanSession, prompter: Prompter) -> Result[None, ReleaseError]:
    current = branching_label(session.plan)
    session.console.header(f"Select branching strategy (current: {current})")
    for key, label in BRANCHING_OPTIONS.items():
        session.console.print(f"[{key}] {label}")
    branching = prompter.choice("Branching strategy", BRANCHING_OPTIONS, current)
    return session.set_branching(branching)


def _review_library_version(
    session: PlanSession, prompter: Prompter, node: LibraryRelease
) -> Result[None, ReleaseError]:
    """Ask for a new version until one is accepted; only I/O failures escape."""
    while True:
        text = prompter.text(
            f"Please enter a new version to release for {node.name}", node.version.value
        )
        result = session.modify_version(node, text)
        if isinstance(result, Ok):
            return result
        if result.error.kind not in _RECOVERABLE:
            return result
        session.console.error(result.error.message)
        if result.error.hint:
            session.console.print(f"hint: {result.error.hint}", Style.DIM)
