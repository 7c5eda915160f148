"""Core data types and configuration for solution generation."""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from slngen.errors import SlnGenError
    from slngen.phases.hierarchy import SolutionHierarchy
    from slngen.phases.reconcile import ConfigurationMatrix


@dataclass
class ProjectRecord:
    """Raw data for one evaluated project, as handed over by an evaluator."""
    full_path: str
    name: str | None = None
    properties: dict[str, str] = field(default_factory=dict)
    conditioned_properties: dict[str, list[str]] = field(default_factory=dict)
    project_configurations: list[tuple[str, str]] = field(default_factory=list)
    custom_project_type_guids: dict[str, str] = field(default_factory=dict)
    solution_items: list[str] = field(default_factory=list)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.full_path)[1]

    @property
    def is_sdk_style(self) -> bool:
        return self.is_property_true("UsingMicrosoftNETSdk")

    def get_property(self, name: str, default: str = "") -> str:
        """Property lookup, case-insensitive like MSBuild."""
        if name in self.properties:
            return self.properties[name] or default
        lowered = name.lower()
        for key, value in self.properties.items():
            if key.lower() == lowered:
                return value or default
        return default

    def is_property_true(self, name: str) -> bool:
        return self.get_property(name).strip().lower() == "true"

    def get_conditioned_values(self, name: str) -> list[str]:
        lowered = name.lower()
        for key, values in self.conditioned_properties.items():
            if key.lower() == lowered:
                return list(values)
        return []


@dataclass(eq=False)
class Project:
    """One entry in the solution."""
    full_path: str
    name: str
    id: uuid.UUID
    category_id: uuid.UUID
    configurations: list[str] = field(default_factory=lambda: ["Debug"])
    platforms: list[str] = field(default_factory=lambda: ["Any CPU"])
    is_primary: bool = False
    is_deployable: bool = False
    is_buildable: bool = True
    is_shared: bool = False
    solution_folder: str = ""

    @property
    def directory(self) -> str:
        return os.path.dirname(self.full_path)


@dataclass(eq=False)
class Folder:
    """A synthetic solution folder."""
    full_path: str
    name: str
    id: uuid.UUID
    parent: Folder | None = field(default=None, repr=False)
    children: list[Folder] = field(default_factory=list, repr=False)
    projects: list[Project] = field(default_factory=list, repr=False)


@dataclass
class Solution:
    """Aggregate passed through the generation phases."""
    projects: list[Project] = field(default_factory=list)
    configurations: list[str] = field(default_factory=list)
    platforms: list[str] = field(default_factory=list)
    solution_items: list[str] = field(default_factory=list)
    solution_id: uuid.UUID = field(default_factory=uuid.uuid4)
    visual_studio_version: str | None = None
    file_format_version: str = "12.00"
    hierarchy: SolutionHierarchy | None = None
    matrix: ConfigurationMatrix | None = None


@dataclass
class GenerationConfig:
    output_path: str | None = None
    use_folders: bool = False
    collapse_folders: bool = False
    collapse_separator: str = " / "
    configurations: list[str] = field(default_factory=list)
    platforms: list[str] = field(default_factory=list)
    reuse_existing: bool = True
    ignore_main_project: bool = False
    is_buildable: bool = True
    visual_studio_version: str | None = None
    file_format_version: str = "12.00"
    verbose: bool = False
    quiet: bool = False


@dataclass
class GenerationResult:
    solution_path: str | None = None
    text: str = ""
    written: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    stats: dict[str, Any] = field(default_factory=dict)
    errors: list[SlnGenError] = field(default_factory=list)
    warnings: list[SlnGenError] = field(default_factory=list)
