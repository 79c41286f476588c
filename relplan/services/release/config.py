from __future__ import annotations

PLAN_SCHEMA = 1

BRANCHING_OPTIONS: dict[str, str] = {
    "auto": "branch to the minor line when releasing from a major branch",
    "major": "release from the major branch (e.g. 4)",
    "minor": "release from a minor branch (e.g. 4.1)",
    "none": "release from the current branch, no branching",
}

DEFAULT_BRANCHING = "auto"

# Existing tags listed in the hint when an upgrade-only edit is rejected.
UPGRADE_HINT_TAGS = 5
