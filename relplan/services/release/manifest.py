"""Library manifests and planning overrides.

Each library checkout holds a ``composer.json`` manifest (its name and the
``require`` constraints on other packages) and may hold a ``.relplan.toml``
with planning overrides:

    upgrade-only = true            # this library never gets a new tag

    [children]
    upgrade-only = ["acme/assets"]       # these children only move to existing tags
    stability-inherit = ["acme/admin"]   # new tags copy this library's stability
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from relplan.core.result import Err, Ok, Result
from relplan.core.structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_str,
    get_str_list,
    get_table,
)
from relplan.services.release.errors import ReleaseError

MANIFEST_FILENAME = "composer.json"
OVERRIDES_FILENAME = ".relplan.toml"


@dataclass(frozen=True, slots=True)
class Manifest:
    name: str
    # (package name, constraint text) in manifest order
    requires: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class Overrides:
    upgrade_only: bool = False
    upgrade_only_children: frozenset[str] = field(default_factory=frozenset)
    stability_inherited_children: frozenset[str] = field(default_factory=frozenset)


def is_library_path(path: Path) -> bool:
    return (path / MANIFEST_FILENAME).is_file()


def _load_json_object(path: Path) -> Result[StrDict, ReleaseError]:
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return Err(
            ReleaseError(
                kind="invalid_manifest",
                message=f"failed to read manifest: {e}",
                hint=str(path),
            )
        )

    data = as_str_dict(obj)
    if data is None:
        return Err(
            ReleaseError(
                kind="invalid_manifest",
                message="manifest root must be a JSON object",
                hint=str(path),
            )
        )
    return Ok(data)


def read_manifest(directory: Path) -> Result[Manifest, ReleaseError]:
    path = directory / MANIFEST_FILENAME
    loaded = _load_json_object(path)
    if isinstance(loaded, Err):
        return loaded
    data = loaded.value

    name = get_str(data, "name")
    if name is None:
        return Err(
            ReleaseError(
                kind="invalid_manifest",
                message="manifest has no package name",
                hint=str(path),
            )
        )

    requires: list[tuple[str, str]] = []
    for child, constraint in (get_table(data, "require") or {}).items():
        if isinstance(constraint, str) and constraint.strip():
            requires.append((child, constraint.strip()))

    return Ok(Manifest(name=name, requires=tuple(requires)))


def read_overrides(directory: Path) -> Result[Overrides, ReleaseError]:
    """Read ``.relplan.toml``; a missing file means no overrides."""
    path = directory / OVERRIDES_FILENAME
    if not path.exists():
        return Ok(Overrides())

    try:
        obj: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        return Err(
            ReleaseError(
                kind="invalid_manifest",
                message=f"failed to read overrides: {e}",
                hint=str(path),
            )
        )

    data = as_str_dict(obj) or {}
    children: StrDict = get_table(data, "children") or {}
    return Ok(
        Overrides(
            upgrade_only=get_bool(data, "upgrade-only"),
            upgrade_only_children=frozenset(get_str_list(children, "upgrade-only")),
            stability_inherited_children=frozenset(get_str_list(children, "stability-inherit")),
        )
    )
