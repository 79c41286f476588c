"""Git repository abstraction.

Planning only ever reads a library checkout: the tag listing feeds the set of
existing versions. Tag creation and pushing belong to downstream steps.

Usage:
    repo = Repository(Path("vendor/acme/framework"))
    match repo.tags():
        case Ok(tags):
            print(", ".join(tags))
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relplan.core.result import Err, Ok, Result
from relplan.platform.process import ProcessError
from relplan.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """Read-only view of a single git checkout.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a git repository (a .git dir, or a .git file for worktrees)."""
        return (self.path / ".git").exists()

    def tags(self) -> Result[tuple[str, ...], GitError]:
        """List all tag names, in git's order.

        Returns:
            Ok(tags) on success
            Err(GitError) on failure
        """
        result = self._run(["tag", "--list"])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command="tag --list",
                        message=e.stderr.strip() or "git tag failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(tuple(ln.strip() for ln in stdout.splitlines() if ln.strip()))

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS
        )
