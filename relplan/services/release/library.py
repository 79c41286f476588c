"""Libraries and the project that owns them.

A Library is one independently tagged checkout: its manifest name, existing
tags, ``require`` constraints and planning overrides. The Project indexes
every library checkout under the vendor directory and loads each one at most
once per session; plan nodes borrow those instances and never copy them.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from relplan.core.config import CONFIG_FILENAME, ProjectConfig, load_config
from relplan.core.result import Err, Ok, Result
from relplan.git.repository import Repository
from relplan.services.release.constraint import Constraint, parse_constraint
from relplan.services.release.errors import ReleaseError
from relplan.services.release.manifest import (
    Overrides,
    is_library_path,
    read_manifest,
    read_overrides,
)
from relplan.services.release.version import Version, parse_tags

TagLister = Callable[[Path], Result[tuple[str, ...], ReleaseError]]


def git_tags(directory: Path) -> Result[tuple[str, ...], ReleaseError]:
    """List tags of a library checkout with git."""
    result = Repository(directory).tags()
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="tags_failed",
                message=f"failed to list tags: {result.error.message}",
                hint=str(directory),
            )
        )
    return Ok(result.value)


@dataclass(frozen=True, slots=True, eq=False)
class Library:
    name: str
    directory: Path
    # canonical version string -> Version
    tags: Mapping[str, Version]
    # (child name, constraint text) in manifest order
    requires: tuple[tuple[str, str], ...]
    overrides: Overrides

    @property
    def upgrade_only(self) -> bool:
        """True if this library must never receive a new tag."""
        return self.overrides.upgrade_only

    def has_tag(self, version: Version) -> bool:
        return version.value in self.tags

    def requirement(self, child_name: str) -> str | None:
        for name, constraint in self.requires:
            if name == child_name:
                return constraint
        return None

    def get_child_constraint(
        self, child_name: str, parent_version: Version
    ) -> Result[Constraint, ReleaseError]:
        """Effective constraint on a child, with ``self.version`` bound to parent_version."""
        text = self.requirement(child_name)
        if text is None:
            return Err(
                ReleaseError(
                    kind="invalid_constraint",
                    message=f"{self.name} does not require {child_name}",
                )
            )
        parsed = parse_constraint(text, parent_version)
        if isinstance(parsed, Err):
            return Err(
                ReleaseError(
                    kind=parsed.error.kind,
                    message=f"{self.name} requires {child_name}: {parsed.error.message}",
                    hint=parsed.error.hint,
                )
            )
        return parsed

    def is_child_upgrade_only(self, child: Library) -> bool:
        return child.upgrade_only or child.name in self.overrides.upgrade_only_children

    def is_stability_inherited(self, child: Library) -> bool:
        return child.name in self.overrides.stability_inherited_children

    def from_version(self, version: Version) -> Version | None:
        """Changelog "from" boundary for releasing this library as version."""
        return version.prior_version_from_tags(self.tags)


def load_library(directory: Path, list_tags: TagLister) -> Result[Library, ReleaseError]:
    manifest = read_manifest(directory)
    if isinstance(manifest, Err):
        return manifest
    overrides = read_overrides(directory)
    if isinstance(overrides, Err):
        return overrides
    tags = list_tags(directory)
    if isinstance(tags, Err):
        return tags

    return Ok(
        Library(
            name=manifest.value.name,
            directory=directory,
            tags=parse_tags(tags.value),
            requires=manifest.value.requires,
            overrides=overrides.value,
        )
    )


class Project:
    """Root library plus every library checkout reachable by name.

    Attributes:
        directory: Project root (holds the root manifest and relplan.toml)
        config: Project configuration
        root: The root library
    """

    def __init__(
        self,
        *,
        directory: Path,
        config: ProjectConfig,
        root: Library,
        index: Mapping[str, Path],
        list_tags: TagLister,
    ) -> None:
        self.directory = directory
        self.config = config
        self.root = root
        self._index = dict(index)
        self._list_tags = list_tags
        self._loaded: dict[str, Library] = {root.name: root}

    @property
    def name(self) -> str:
        return self.root.name

    @property
    def plan_path(self) -> Path:
        return self.config.plan_path(self.directory)

    def knows(self, name: str) -> bool:
        return name in self._loaded or name in self._index

    def library(self, name: str) -> Result[Library, ReleaseError]:
        """Get a library by manifest name, loading it on first use."""
        cached = self._loaded.get(name)
        if cached is not None:
            return Ok(cached)

        directory = self._index.get(name)
        if directory is None:
            return Err(
                ReleaseError(
                    kind="invalid_manifest",
                    message=f"library not found in project: {name}",
                    hint=str(self.config.vendor_dir(self.directory)),
                )
            )

        loaded = load_library(directory, self._list_tags)
        if isinstance(loaded, Err):
            return loaded
        self._loaded[name] = loaded.value
        return loaded

    def children(self, library: Library) -> Result[list[Library], ReleaseError]:
        """Required libraries that belong to this project, in manifest order."""
        out: list[Library] = []
        for name, _ in library.requires:
            if name == library.name or not self.knows(name):
                continue
            child = self.library(name)
            if isinstance(child, Err):
                return child
            out.append(child.value)
        return Ok(out)


def _discover(vendor_dir: Path) -> dict[str, Path]:
    """Index ``vendor/<org>/<name>`` checkouts by package name."""
    index: dict[str, Path] = {}
    if not vendor_dir.is_dir():
        return index
    for org in sorted(p for p in vendor_dir.iterdir() if p.is_dir()):
        for path in sorted(p for p in org.iterdir() if p.is_dir()):
            if is_library_path(path) and Repository(path).exists():
                index[f"{org.name}/{path.name}"] = path
    return index


def _load_project_config(directory: Path) -> Result[ProjectConfig, ReleaseError]:
    """Read relplan.toml; only a missing file falls back to the defaults."""
    path = directory / CONFIG_FILENAME
    if not path.exists():
        return Ok(ProjectConfig())

    loaded = load_config(path)
    if isinstance(loaded, Err):
        return Err(
            ReleaseError(
                kind="invalid_config",
                message=loaded.error.message,
                hint=str(path),
            )
        )
    return loaded


def load_project(
    directory: Path,
    *,
    config: ProjectConfig | None = None,
    list_tags: TagLister = git_tags,
) -> Result[Project, ReleaseError]:
    """Load the root library and index the library checkouts of a project.

    Args:
        directory: Project root containing the root manifest.
        config: Configuration; read from relplan.toml when omitted.
        list_tags: Tag source for each library directory.
    """
    directory = directory.resolve()
    if not is_library_path(directory):
        return Err(
            ReleaseError(
                kind="invalid_manifest",
                message=f"no library in directory {directory}",
                hint="Run from a project root containing composer.json",
            )
        )

    cfg = config
    if cfg is None:
        loaded_config = _load_project_config(directory)
        if isinstance(loaded_config, Err):
            return loaded_config
        cfg = loaded_config.value

    root = load_library(directory, list_tags)
    if isinstance(root, Err):
        return root

    return Ok(
        Project(
            directory=directory,
            config=cfg,
            root=root.value,
            index=_discover(cfg.vendor_dir(directory)),
            list_tags=list_tags,
        )
    )
