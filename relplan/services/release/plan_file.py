from __future__ import annotations

import json
from pathlib import Path

from relplan.core.result import Err, Ok, Result
from relplan.core.structured import StrDict, as_obj_list, as_str_dict, get_int, get_str
from relplan.platform.files import atomic_write_json
from relplan.services.release.config import PLAN_SCHEMA
from relplan.services.release.errors import ReleaseError
from relplan.services.release.library import Project
from relplan.services.release.plan import LibraryRelease
from relplan.services.release.version import parse_version


def _node_payload(node: LibraryRelease) -> dict[str, object]:
    return {
        "library": node.name,
        "version": node.version.value,
        "new_release": node.is_new_release,
        "items": [_node_payload(item) for item in node.items],
    }


def plan_payload(plan: LibraryRelease) -> dict[str, object]:
    return {
        "schema": PLAN_SCHEMA,
        "branching": plan.branching,
        "root": _node_payload(plan),
    }


def write_plan_file(*, path: Path, plan: LibraryRelease) -> Result[None, ReleaseError]:
    try:
        atomic_write_json(path, plan_payload(plan))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="plan_io_failed",
                message=f"failed to write release plan: {e}",
                hint=str(path),
            )
        )
    return Ok(None)


def _invalid(message: str, path: Path) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="invalid_plan", message=message, hint=str(path)))


def _read_node(
    data: StrDict, *, project: Project, path: Path
) -> Result[LibraryRelease, ReleaseError]:
    name = get_str(data, "library")
    version_s = get_str(data, "version")
    if name is None or version_s is None:
        return _invalid("plan node missing library or version", path)

    library = project.library(name)
    if isinstance(library, Err):
        return _invalid(f"unknown library in plan: {name}", path)

    version = parse_version(version_s)
    if isinstance(version, Err):
        return _invalid(f"invalid version for {name} in plan: {version_s!r}", path)

    node = LibraryRelease(library.value, version.value)
    for item in as_obj_list(data.get("items")) or []:
        child = as_str_dict(item)
        if child is None:
            return _invalid(f"invalid plan item under {name}", path)
        parsed = _read_node(child, project=project, path=path)
        if isinstance(parsed, Err):
            return parsed
        node.add_item(parsed.value)

    return Ok(node)


def read_plan_file(
    *, path: Path, project: Project
) -> Result[LibraryRelease | None, ReleaseError]:
    """Load a cached plan; Ok(None) when no plan has been saved yet.

    The stored ``new_release`` flags are informational only: whether a node
    gets a new tag is always derived from the library's current tags.
    """
    if not path.exists():
        return Ok(None)

    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return _invalid(f"failed to load release plan: {e}", path)

    data = as_str_dict(obj)
    if data is None:
        return _invalid("release plan root must be a JSON object", path)

    schema = get_int(data, "schema")
    if schema != PLAN_SCHEMA:
        return _invalid(f"unsupported release plan schema: {schema}", path)

    root = as_str_dict(data.get("root"))
    if root is None:
        return _invalid("release plan has no root node", path)

    root_name = get_str(root, "library")
    if root_name is not None and root_name != project.name:
        return _invalid(f"release plan belongs to {root_name}, not {project.name}", path)

    plan = _read_node(root, project=project, path=path)
    if isinstance(plan, Err):
        return plan
    plan.value.branching = get_str(data, "branching")
    return Ok(plan.value)
