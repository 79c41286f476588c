"""Platform helpers: atomic file writes and subprocess execution."""

from .files import atomic_write_json, atomic_write_text
from .process import ProcessError, run

__all__ = [
    "ProcessError",
    "atomic_write_json",
    "atomic_write_text",
    "run",
]
