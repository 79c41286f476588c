"""Plan session: build, persist and amend the release plan of one project.

The cached plan is the resume point of an interrupted release. Resuming reuses
it verbatim (only the branching may be overridden) instead of re-deriving
versions that may have drifted since new tags were created. Every accepted
change is written back immediately.
"""

from __future__ import annotations

from dataclasses import dataclass

from relplan.core.result import Err, Ok, Result
from relplan.output.console import ConsoleProtocol
from relplan.services.release.constraint import SelfVersion
from relplan.services.release.config import (
    BRANCHING_OPTIONS,
    DEFAULT_BRANCHING,
    UPGRADE_HINT_TAGS,
)
from relplan.services.release.errors import ReleaseError
from relplan.services.release.library import Project
from relplan.services.release.plan import LibraryRelease
from relplan.services.release.plan_file import read_plan_file, write_plan_file
from relplan.services.release.planner import generate_child_releases
from relplan.services.release.version import Version, parse_version, sort_versions


@dataclass(frozen=True, slots=True)
class PlanLine:
    key: str
    node: LibraryRelease
    depth: int
    text: str


class PlanSession:
    def __init__(
        self,
        *,
        project: Project,
        version: Version,
        branching: str | None,
        console: ConsoleProtocol,
    ) -> None:
        self.project = project
        self.version = version
        self.branching = branching
        self.console = console
        self._plan: LibraryRelease | None = None

    @property
    def plan(self) -> LibraryRelease:
        if self._plan is None:
            raise RuntimeError("release plan not built yet; call build_initial_plan()")
        return self._plan

    def save(self) -> Result[None, ReleaseError]:
        return write_plan_file(path=self.project.plan_path, plan=self.plan)

    def build_initial_plan(self) -> Result[LibraryRelease, ReleaseError]:
        """Load the cached plan, or generate and persist a new one."""
        if self.branching is not None and self.branching not in BRANCHING_OPTIONS:
            return Err(_invalid_branching(self.branching))

        cached = read_plan_file(path=self.project.plan_path, project=self.project)
        if isinstance(cached, Err):
            return cached

        if cached.value is not None:
            plan = cached.value
            self.console.info("Loading cached release plan from prior session")
            if plan.version.value != self.version.value:
                self.console.warning(
                    f"cached plan releases {plan.version.value}, not {self.version.value}"
                )
            self._plan = plan
            if self.branching and self.branching != plan.branching:
                self.console.info(f"Updating branching to {self.branching}")
                plan.branching = self.branching
                saved = self.save()
                if isinstance(saved, Err):
                    return saved
            return Ok(plan)

        branching = self.branching or self.project.config.plan.branching or DEFAULT_BRANCHING
        if branching not in BRANCHING_OPTIONS:
            return Err(_invalid_branching(branching))

        self.console.info("Automatically building a suggested release plan")
        plan = LibraryRelease(self.project.root, self.version, branching=branching)
        generated = generate_child_releases(self.project, plan)
        if isinstance(generated, Err):
            return generated

        self._plan = plan
        saved = self.save()
        if isinstance(saved, Err):
            return saved
        return Ok(plan)

    def set_branching(self, branching: str) -> Result[None, ReleaseError]:
        if branching not in BRANCHING_OPTIONS:
            return Err(_invalid_branching(branching))
        self.plan.branching = branching
        self.branching = branching
        return self.save()

    def is_upgrade_only(self, node: LibraryRelease) -> bool:
        """Upgrade-only by its own flag, or by the override of the library requiring it."""
        if node.library.upgrade_only:
            return True
        for parent, item, _ in self.plan.walk_with_parents():
            if item is node and parent is not None:
                return parent.library.is_child_upgrade_only(node.library)
        return False

    def _ancestors(self, node: LibraryRelease) -> tuple[str, ...]:
        path: list[str] = []

        def visit(current: LibraryRelease) -> bool:
            if current is node:
                return True
            path.append(current.name)
            if any(visit(item) for item in current.items):
                return True
            path.pop()
            return False

        visit(self.plan)
        return tuple(path)

    def modify_version(self, node: LibraryRelease, text: str) -> Result[None, ReleaseError]:
        """Replace the version of one plan node.

        A node left on an existing tag loses its children. A node that
        becomes a new tag gets its subtree generated again, and a node that
        stays a new tag moves its ``self.version`` children along with it.
        If any of that fails the subtree is left exactly as it was.
        """
        parsed = parse_version(text)
        if isinstance(parsed, Err):
            return parsed
        new_version = parsed.value

        if self.is_upgrade_only(node) and not node.library.has_tag(new_version):
            latest = [v.value for v in sort_versions(node.library.tags, descending=True)]
            return Err(
                ReleaseError(
                    kind="upgrade_only",
                    message=(
                        f"{node.name} is marked as upgrade-only; "
                        f"{new_version.value} is not an existing tag"
                    ),
                    hint=(
                        "existing tags: " + ", ".join(latest[:UPGRADE_HINT_TAGS])
                        if latest
                        else "this library has no tags yet"
                    ),
                )
            )

        snapshot = [(item, item.version, item.items) for item in node.walk()]
        applied = self._apply_version(node, new_version, self._ancestors(node))
        if isinstance(applied, Err):
            for item, version, items in snapshot:
                item.version = version
                item.items = items
            return applied

        return self.save()

    def _apply_version(
        self, node: LibraryRelease, version: Version, ancestors: tuple[str, ...]
    ) -> Result[None, ReleaseError]:
        was_new_release = node.is_new_release
        node.version = version

        if not node.is_new_release:
            node.clear_items()
            return Ok(None)

        if not was_new_release:
            node.clear_items()
            return generate_child_releases(self.project, node, ancestors=ancestors)

        # Still a new tag: children released in lockstep follow the new version.
        lineage = (*ancestors, node.name)
        for item in node.items:
            constraint = node.library.get_child_constraint(item.name, version)
            if isinstance(constraint, Err):
                return constraint
            if not isinstance(constraint.value, SelfVersion) or item.version == version:
                continue
            if node.library.is_child_upgrade_only(item.library) and not item.library.has_tag(
                version
            ):
                return Err(
                    ReleaseError(
                        kind="no_matching_tag",
                        message=(
                            f"library {item.name} cannot be upgraded to version "
                            f"{version.value} without a new release"
                        ),
                        hint=f"Tag {item.name} {version.value}, or remove upgrade-only",
                    )
                )
            applied = self._apply_version(item, version, lineage)
            if isinstance(applied, Err):
                return applied
        return Ok(None)

    def plan_lines(self) -> list[PlanLine]:
        """Indented, numbered description of every node, root first."""
        lines: list[PlanLine] = []
        for index, (_, node, depth) in enumerate(self.plan.walk_with_parents(), start=1):
            lines.append(
                PlanLine(key=str(index), node=node, depth=depth, text=describe_node(node, depth))
            )
        return lines


def describe_node(node: LibraryRelease, depth: int) -> str:
    indent = " " * (3 * depth - 2) + "└ " if depth else ""
    if not node.is_new_release:
        return f"{indent}{node.name} ({node.version.value} existing tag)"

    text = f"{indent}{node.name} ({node.version.value}) new tag"
    prior = node.library.from_version(node.version)
    if prior is not None:
        text += f", prior version {prior.value}"
    return text


def _invalid_branching(branching: str) -> ReleaseError:
    return ReleaseError(
        kind="invalid_branching",
        message=f"unknown branching strategy: {branching}",
        hint="Expected one of: " + ", ".join(BRANCHING_OPTIONS),
    )
