"""Release versions: parsing, ordering, stability and next-version inference.

Versions look like ``4.1.0`` or ``4.1.0-rc2``. The patch number may be omitted
when parsing (``4.1`` reads as ``4.1.0``) but is always rendered.

Ordering compares ``(major, minor, patch)`` first, then the stability rank
(``dev < alpha < beta < rc < stable``), then the stability number. A
pre-release without a number ranks as number 1, so ``4.1.0-rc`` and
``4.1.0-rc1`` are equal under the order (and therefore compare ``==``).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Literal, cast

from relplan.core.result import Err, Ok, Result
from relplan.services.release.errors import ReleaseError

Stability = Literal["stable", "rc", "beta", "alpha", "dev"]

STABILITY_RANK: dict[Stability, int] = {
    "dev": 0,
    "alpha": 1,
    "beta": 2,
    "rc": 3,
    "stable": 4,
}

VERSION_FORMAT_HINT = "Expected: MAJOR.MINOR(.PATCH)(-[rc|beta|alpha|dev][N])"

_VERSION_RE = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<stability>rc|beta|alpha|dev)(?P<number>[1-9]\d*)?)?$"
)


@dataclass(frozen=True, slots=True, eq=False)
class Version:
    major: int
    minor: int
    patch: int
    stability: Stability = "stable"
    stability_number: int | None = None

    @property
    def value(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.stability == "stable":
            return base
        return f"{base}-{self.stability}{self.stability_number or ''}"

    @property
    def base(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @property
    def is_stable(self) -> bool:
        return self.stability == "stable"

    @property
    def is_prerelease(self) -> bool:
        return self.stability != "stable"

    def sort_key(self) -> tuple[int, int, int, int, int]:
        return (
            self.major,
            self.minor,
            self.patch,
            STABILITY_RANK[self.stability],
            self.stability_number or 1,
        )

    def with_stability(self, stability: Stability, number: int | None = None) -> Version:
        """Clone with the stability replaced; stable versions never carry a number."""
        return Version(
            self.major,
            self.minor,
            self.patch,
            stability,
            None if stability == "stable" else number,
        )

    def next_version(
        self, stability: Stability = "stable", stability_number: int | None = None
    ) -> Version:
        """Guess the version to tag after this one on the given stability track.

        | current          | target                   | result                      |
        |------------------|--------------------------|-----------------------------|
        | pre-release      | stable                   | same x.y.z, suffix stripped |
        | pre-release s    | s                        | number + 1                  |
        | pre-release s    | higher-ranked pre-release| same x.y.z, target          |
        | pre-release s    | lower-ranked pre-release | patch + 1, target           |
        | stable           | stable                   | patch + 1                   |
        | stable           | pre-release              | patch + 1, target           |

        The target number (default 1) is used whenever the stability changes;
        on the same track the number never goes below ``current + 1``.
        Bumping minor or major is up to the caller.
        """
        if stability == "stable":
            if self.is_prerelease:
                return self.with_stability("stable")
            return Version(self.major, self.minor, self.patch + 1)

        number = stability_number or 1
        if self.stability == stability:
            return self.with_stability(stability, max((self.stability_number or 1) + 1, number))
        if self.is_prerelease and STABILITY_RANK[stability] > STABILITY_RANK[self.stability]:
            return self.with_stability(stability, number)
        return Version(self.major, self.minor, self.patch + 1, stability, number)

    def prior_version_from_tags(self, tags: Mapping[str, Version]) -> Version | None:
        """Greatest existing tag strictly below this version on the same line.

        A stable version only looks at stable tags of the same major; a
        pre-release looks at any lower tag.
        """
        candidates = [
            v
            for v in tags.values()
            if v < self and (self.is_prerelease or (v.is_stable and v.major == self.major))
        ]
        return max(candidates, default=None)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Version({self.value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    def __lt__(self, other: Version) -> bool:
        return self.sort_key() < other.sort_key()

    def __le__(self, other: Version) -> bool:
        return self.sort_key() <= other.sort_key()

    def __gt__(self, other: Version) -> bool:
        return self.sort_key() > other.sort_key()

    def __ge__(self, other: Version) -> bool:
        return self.sort_key() >= other.sort_key()


def try_parse_version(text: str) -> Version | None:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    stability: Stability = "stable"
    number: int | None = None
    if m.group("stability"):
        stability = cast(Stability, m.group("stability"))
        number = int(m.group("number")) if m.group("number") else None
    return Version(
        int(m.group("major")),
        int(m.group("minor")),
        int(m.group("patch") or 0),
        stability,
        number,
    )


def parse_version(text: str) -> Result[Version, ReleaseError]:
    version = try_parse_version(text)
    if version is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"invalid version: {text!r}",
                hint=VERSION_FORMAT_HINT,
            )
        )
    return Ok(version)


def parse_tags(names: Iterable[str]) -> dict[str, Version]:
    """Build a tag map keyed by canonical version string; non-version tags are skipped."""
    tags: dict[str, Version] = {}
    for name in names:
        version = try_parse_version(name)
        if version is not None:
            tags[version.value] = version
    return tags


def sort_versions(tags: Mapping[str, Version], *, descending: bool = False) -> list[Version]:
    return sorted(tags.values(), reverse=descending)
