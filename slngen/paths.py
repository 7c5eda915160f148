"""Path helpers shared by the phases and the solution reader/writer."""

from __future__ import annotations

import os


def normalize_path(path: str) -> str:
    """Absolute, normalised form of a path (no trailing separator)."""
    return os.path.normpath(os.path.abspath(path))


def path_key(path: str) -> str:
    """Case-insensitive lookup key for a path."""
    return normalize_path(path).casefold()


def split_segments(path: str) -> list[str]:
    """Split a normalised path into whole segments.

    The leading empty segment of an absolute POSIX path is kept so that
    joining the segments back with os.sep restores the original path.
    """
    normalized = os.path.normpath(path)
    drive, rest = os.path.splitdrive(normalized)
    segments = rest.split(os.sep)
    if drive:
        segments[0] = drive + segments[0]
    return segments


def join_segments(segments: list[str]) -> str:
    joined = os.sep.join(segments)
    # Filesystem root or a bare drive ("C:") keeps its separator
    if not joined or joined.endswith(":"):
        return joined + os.sep
    return joined


def to_solution_path(path: str, solution_dir: str | None = None) -> str:
    """Render a path for a solution file: relative to the solution, with backslashes."""
    rendered = path
    if solution_dir:
        try:
            rendered = os.path.relpath(normalize_path(path), normalize_path(solution_dir))
        except ValueError:
            # Different drive, no relative form exists
            rendered = normalize_path(path)
    return rendered.replace("/", "\\")


def from_solution_path(path: str, solution_dir: str) -> str:
    """Resolve a path read from a solution file against the solution's directory."""
    native = path.replace("\\", os.sep).replace("/", os.sep)
    return normalize_path(os.path.join(solution_dir, native))
