"""Release planning.

- version / constraint: value types parsed from tags and manifests
- manifest / library: the dependency graph of a project
- plan / planner: the release plan tree and its generation
- plan_file / session / review: persistence and interactive amendment
"""

from __future__ import annotations

from relplan.services.release.errors import ReleaseError
from relplan.services.release.library import Library, Project, load_project
from relplan.services.release.plan import LibraryRelease
from relplan.services.release.planner import generate_child_releases
from relplan.services.release.session import PlanSession
from relplan.services.release.version import Version, parse_version

__all__ = [
    "Library",
    "LibraryRelease",
    "PlanSession",
    "Project",
    "ReleaseError",
    "Version",
    "generate_child_releases",
    "load_project",
    "parse_version",
]
