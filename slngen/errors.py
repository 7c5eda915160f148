"""Error taxonomy for solution generation."""

from __future__ import annotations

import uuid


class SlnGenError(Exception):
    """Base class for all slngen errors and diagnostics."""


class InvalidIdentifier(SlnGenError):
    """A declared project identifier could not be parsed.

    Carries a freshly generated identifier the user can paste into the
    project file to fix it.
    """

    def __init__(self, value: str, suggested: uuid.UUID, project_path: str = "") -> None:
        self.value = value
        self.suggested = suggested
        self.project_path = project_path
        location = f"{project_path}: " if project_path else ""
        super().__init__(
            f'{location}The ProjectGuid property value "{value}" is not a valid GUID. '
            f"Consider using {{{str(suggested).upper()}}} instead."
        )


class AmbiguousHierarchyRoot(SlnGenError):
    """No directories were supplied to compute a hierarchy root from."""

    def __init__(self) -> None:
        super().__init__("Cannot determine a hierarchy root without any projects.")


class DuplicateIdentifier(SlnGenError):
    def __init__(self, identifier: uuid.UUID, paths: list[str]) -> None:
        self.identifier = identifier
        self.paths = paths
        super().__init__(
            f"Identifier {{{str(identifier).upper()}}} is used by more than one project: "
            + ", ".join(paths)
        )


class DuplicateName(SlnGenError):
    def __init__(self, name: str, paths: list[str]) -> None:
        self.name = name
        self.paths = paths
        super().__init__(
            f'Project name "{name}" is used by more than one project: ' + ", ".join(paths)
        )


class ManifestError(SlnGenError):
    """A project manifest could not be read."""
