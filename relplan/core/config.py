"""Typed project configuration.

A project may carry a ``relplan.toml`` at its root:

    [paths]
    vendor = "vendor"
    plan = ".relplan/release-plan.json"

    [plan]
    branching = "auto"

Every key is optional; missing keys fall back to the defaults below.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_PLAN_PATH",
    "DEFAULT_VENDOR_DIR",
    "ConfigError",
    "PathsConfig",
    "PlanConfig",
    "ProjectConfig",
    "load_config",
]

CONFIG_FILENAME = "relplan.toml"

DEFAULT_VENDOR_DIR = "vendor"
DEFAULT_PLAN_PATH = ".relplan/release-plan.json"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Paths relative to the project root."""

    vendor: str = DEFAULT_VENDOR_DIR
    plan: str = DEFAULT_PLAN_PATH


@dataclass(frozen=True, slots=True)
class PlanConfig:
    """Planning defaults."""

    # Used when no --branching override is given and no plan is cached.
    branching: str | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Main configuration container."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    plan: PlanConfig = field(default_factory=PlanConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ProjectConfig:
        """Create ProjectConfig from a mapping (parsed TOML)."""
        paths: StrDict = get_table(data, "paths") or {}
        plan: StrDict = get_table(data, "plan") or {}

        return cls(
            paths=PathsConfig(
                vendor=get_str(paths, "vendor") or DEFAULT_VENDOR_DIR,
                plan=get_str(paths, "plan") or DEFAULT_PLAN_PATH,
            ),
            plan=PlanConfig(branching=get_str(plan, "branching")),
        )

    def vendor_dir(self, root: Path) -> Path:
        return root / self.paths.vendor

    def plan_path(self, root: Path) -> Path:
        return root / self.paths.plan


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ProjectConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relplan.toml

    Returns:
        Ok(ProjectConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ProjectConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))

