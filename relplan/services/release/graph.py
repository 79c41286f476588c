"""Read-only view of a project's library dependency graph."""

from __future__ import annotations

from relplan.core.result import Err, Ok, Result
from relplan.services.release.errors import ReleaseError
from relplan.services.release.library import Library, Project


def dependency_lines(project: Project) -> Result[list[str], ReleaseError]:
    """One line per edge, indented under the requiring library.

    A library already shown higher up the same branch is printed once more
    with a ``(cycle)`` marker and not expanded again.
    """
    lines = [project.root.name]

    def visit(library: Library, depth: int, lineage: tuple[str, ...]) -> Result[None, ReleaseError]:
        children = project.children(library)
        if isinstance(children, Err):
            return children
        for child in children.value:
            flags: list[str] = []
            if library.is_child_upgrade_only(child):
                flags.append("upgrade-only")
            if library.is_stability_inherited(child):
                flags.append("stability-inherit")
            if child.name in lineage:
                flags.append("cycle")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            constraint = library.requirement(child.name) or ""
            lines.append(f"{'   ' * depth}└ {child.name} {constraint}{suffix}")
            if child.name not in lineage:
                visited = visit(child, depth + 1, (*lineage, child.name))
                if isinstance(visited, Err):
                    return visited
        return Ok(None)

    result = visit(project.root, 0, (project.root.name,))
    if isinstance(result, Err):
        return result
    return Ok(lines)
