"""Composer-style dependency constraints.

Only the shapes found in library manifests are supported:

- ``self.version``: the child is released as exactly the parent's version
- ``^4.1`` / ``^4.1.2``: caret, compatible up to the next breaking boundary
- ``~4.1`` / ``~4.1.2``: tilde, compatible up to the next minor (next major
  for the two-part form)
- ``4.*`` / ``4.1.*`` and branch aliases ``4.x-dev`` / ``4.1.x-dev``
- ``4.1.2`` / ``4.1.2-rc1``: exact pin

A trailing stability flag (``^4.1@dev``) is accepted and ignored. Text is
parsed once into a SelfVersion or BoundedRange; callers match on those.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from relplan.core.result import Err, Ok, Result
from relplan.services.release.errors import ReleaseError
from relplan.services.release.version import Version, try_parse_version

SELF_VERSION = "self.version"

Ceiling = tuple[int, int, int]

_WILDCARD_RE = re.compile(r"^(?P<major>\d+)(?:\.(?P<minor>\d+))?\.[x*](?:-dev)?$")


@dataclass(frozen=True, slots=True)
class SelfVersion:
    """``self.version`` bound to the parent's chosen version."""

    version: Version

    @property
    def value(self) -> str:
        return SELF_VERSION

    @property
    def is_self_version(self) -> bool:
        return True

    @property
    def min_version(self) -> Version:
        return self.version

    def matches(self, version: Version) -> bool:
        return version.value == self.version.value

    def filter_versions(self, tags: Mapping[str, Version]) -> dict[str, Version]:
        return {tag: v for tag, v in tags.items() if self.matches(v)}


@dataclass(frozen=True, slots=True)
class BoundedRange:
    """A minimum version plus an exclusive ``(major, minor, patch)`` ceiling.

    A stable minimum compares on ``(major, minor, patch)`` only, so
    pre-releases of the floor match (the floor acts as ``X.Y.Z-dev``).
    A ceiling of None is an exact pin.
    """

    value: str
    min_version: Version
    ceiling: Ceiling | None

    @property
    def is_self_version(self) -> bool:
        return False

    def matches(self, version: Version) -> bool:
        if self.ceiling is None:
            return version == self.min_version
        if self.min_version.is_prerelease:
            if version < self.min_version:
                return False
        elif version.base < self.min_version.base:
            return False
        return version.base < self.ceiling

    def filter_versions(self, tags: Mapping[str, Version]) -> dict[str, Version]:
        return {tag: v for tag, v in tags.items() if self.matches(v)}


Constraint = SelfVersion | BoundedRange


def _invalid(text: str) -> Err[ReleaseError]:
    return Err(
        ReleaseError(
            kind="invalid_constraint",
            message=f"unsupported version constraint: {text!r}",
            hint="Use self.version, ^X.Y, ~X.Y, X.Y.*, X.Y.x-dev or an exact X.Y.Z",
        )
    )


def _caret_ceiling(floor: Version, has_patch: bool) -> Ceiling:
    if floor.major > 0:
        return (floor.major + 1, 0, 0)
    if floor.minor > 0 or not has_patch:
        return (0, floor.minor + 1, 0)
    return (0, 0, floor.patch + 1)


def _tilde_ceiling(floor: Version, has_patch: bool) -> Ceiling:
    if has_patch:
        return (floor.major, floor.minor + 1, 0)
    return (floor.major + 1, 0, 0)


def parse_constraint(text: str, reference: Version) -> Result[Constraint, ReleaseError]:
    """Parse a manifest constraint.

    Args:
        text: Constraint as written in the manifest.
        reference: The parent's chosen version, bound by ``self.version``.
    """
    raw = text.strip()
    if raw == SELF_VERSION:
        return Ok(SelfVersion(version=reference))

    body = raw.split("@", 1)[0].strip()
    if not body:
        return _invalid(text)

    m = _WILDCARD_RE.match(body)
    if m is not None:
        major = int(m.group("major"))
        if m.group("minor") is None:
            return Ok(BoundedRange(raw, Version(major, 0, 0), (major + 1, 0, 0)))
        minor = int(m.group("minor"))
        return Ok(BoundedRange(raw, Version(major, minor, 0), (major, minor + 1, 0)))

    op = body[0] if body[0] in "^~" else ""
    floor = try_parse_version(body[len(op) :])
    if floor is None:
        return _invalid(text)

    if not op:
        return Ok(BoundedRange(raw, floor, None))

    has_patch = body[1:].split("-", 1)[0].count(".") >= 2
    ceiling = _caret_ceiling(floor, has_patch) if op == "^" else _tilde_ceiling(floor, has_patch)
    return Ok(BoundedRange(raw, floor, ceiling))
