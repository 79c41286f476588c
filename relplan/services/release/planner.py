"""Release plan generation.

Walks the dependency graph from a parent plan node and proposes, for each
child library, either an upgrade to an existing tag or a new tag to create.
Only children receiving a new tag are expanded further.
"""

from __future__ import annotations

from relplan.core.result import Err, Ok, Result
from relplan.services.release.constraint import SelfVersion
from relplan.services.release.errors import ReleaseError
from relplan.services.release.library import Library, Project
from relplan.services.release.plan import LibraryRelease
from relplan.services.release.version import Stability, sort_versions


def generate_child_releases(
    project: Project,
    parent: LibraryRelease,
    *,
    ancestors: tuple[str, ...] = (),
) -> Result[None, ReleaseError]:
    """Recursively populate parent.items.

    Args:
        project: Project providing child libraries.
        parent: Node to expand; its existing items are kept.
        ancestors: Names of the libraries above parent, for cycle detection.

    On error parent may be partially populated; callers discard or restore it.
    """
    children = project.children(parent.library)
    if isinstance(children, Err):
        return children

    lineage = (*ancestors, parent.name)
    for child in children.value:
        if parent.library.is_child_upgrade_only(child):
            release = generate_upgrade_release(parent, child)
        else:
            release = propose_new_release(parent, child)
        if isinstance(release, Err):
            return release

        node = release.value
        parent.add_item(node)
        if not node.is_new_release:
            continue

        if child.name in lineage:
            return Err(
                ReleaseError(
                    kind="dependency_cycle",
                    message=f"dependency cycle: {' -> '.join((*lineage, child.name))}",
                    hint="Mark one of these libraries upgrade-only, or pick an existing tag",
                )
            )
        expanded = generate_child_releases(project, node, ancestors=lineage)
        if isinstance(expanded, Err):
            return expanded

    return Ok(None)


def generate_upgrade_release(
    parent: LibraryRelease, child: Library
) -> Result[LibraryRelease, ReleaseError]:
    """Pick the best existing tag for an upgrade-only child."""
    constraint = parent.library.get_child_constraint(child.name, parent.version)
    if isinstance(constraint, Err):
        return constraint

    if isinstance(constraint.value, SelfVersion):
        version = constraint.value.version
        if not child.has_tag(version):
            return Err(
                ReleaseError(
                    kind="no_matching_tag",
                    message=(
                        f"library {child.name} cannot be upgraded to version "
                        f"{version.value} without a new release"
                    ),
                    hint=f"Tag {child.name} {version.value}, or remove upgrade-only",
                )
            )
        return Ok(LibraryRelease(child, version))

    candidates = constraint.value.filter_versions(child.tags)

    # A stable release never depends on unstable tags.
    if parent.version.is_stable:
        candidates = {tag: v for tag, v in candidates.items() if v.is_stable}

    if not candidates:
        return Err(
            ReleaseError(
                kind="no_matching_tag",
                message=(
                    f"library {child.name} has no available tags that match "
                    f"{constraint.value.value}"
                ),
                hint="Remove upgrade-only for this library, or tag a new release",
            )
        )

    return Ok(LibraryRelease(child, max(candidates.values())))


def propose_new_release(
    parent: LibraryRelease, child: Library
) -> Result[LibraryRelease, ReleaseError]:
    """Propose the version to tag for a child that may get a new release."""
    constraint = parent.library.get_child_constraint(child.name, parent.version)
    if isinstance(constraint, Err):
        return constraint

    # self.version: released in lockstep; if already tagged this is just an upgrade.
    if isinstance(constraint.value, SelfVersion):
        return Ok(LibraryRelease(child, parent.version))

    stability: Stability = "stable"
    stability_number: int | None = None
    if parent.library.is_stability_inherited(child):
        stability = parent.version.stability
        stability_number = parent.version.stability_number

    candidates = sort_versions(constraint.value.filter_versions(child.tags), descending=True)
    if candidates:
        version = candidates[0].next_version(stability, stability_number)
    else:
        # No tag satisfies the constraint yet: its floor is the new tag.
        version = constraint.value.min_version.with_stability(stability, stability_number)

    return Ok(LibraryRelease(child, version))
