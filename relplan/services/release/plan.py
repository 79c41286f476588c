"""Release plan tree.

Each LibraryRelease pairs a library with the version it will be released (or
upgraded) as, and owns the plan nodes of the dependencies that change with
it. A node whose version is already tagged is a closed subtree: it never has
items, since that release already happened.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from relplan.services.release.library import Library
from relplan.services.release.version import Version


def _no_items() -> list[LibraryRelease]:
    return []


@dataclass(slots=True, eq=False)
class LibraryRelease:
    library: Library
    version: Version
    items: list[LibraryRelease] = field(default_factory=_no_items)
    # Branching strategy; only meaningful on the root node.
    branching: str | None = None

    @property
    def name(self) -> str:
        return self.library.name

    @property
    def is_new_release(self) -> bool:
        """True if this library gets a new tag, False if it moves to an existing one."""
        return not self.library.has_tag(self.version)

    def add_item(self, item: LibraryRelease) -> None:
        self.items.append(item)

    def clear_items(self) -> None:
        self.items = []

    def walk(self) -> Iterator[LibraryRelease]:
        """Pre-order traversal, self first."""
        yield self
        for item in self.items:
            yield from item.walk()

    def walk_with_parents(
        self, parent: LibraryRelease | None = None, depth: int = 0
    ) -> Iterator[tuple[LibraryRelease | None, LibraryRelease, int]]:
        yield (parent, self, depth)
        for item in self.items:
            yield from item.walk_with_parents(self, depth + 1)

    def get_item(self, name: str) -> LibraryRelease | None:
        """First node (pre-order) releasing the named library."""
        for node in self.walk():
            if node.name == name:
                return node
        return None

    def new_releases(self) -> list[LibraryRelease]:
        return [node for node in self.walk() if node.is_new_release]
