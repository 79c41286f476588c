"""Error type for the release planning services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "invalid_version",
    "invalid_constraint",
    "no_matching_tag",
    "dependency_cycle",
    "upgrade_only",
    "invalid_branching",
    "invalid_manifest",
    "invalid_config",
    "invalid_plan",
    "plan_io_failed",
    "tags_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    ``hint`` tells the operator what to do about it, when there is something
    to do besides retrying.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
