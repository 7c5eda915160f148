"""Solution file serialisation."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from slngen.config import Solution
from slngen.dotnet import project_types
from slngen.identifiers import format_identifier
from slngen.paths import to_solution_path
from slngen.phases.reconcile import reconcile, solution_configurations, solution_platforms

logger = logging.getLogger(__name__)

MINIMUM_VISUAL_STUDIO_VERSION = "10.0.40219.1"
SOLUTION_ITEMS_NAME = "Solution Items"

_FOLDER_CATEGORY = format_identifier(project_types.SOLUTION_FOLDER)


def _project_line(category: str, name: str, path: str, identifier: str) -> str:
    return f'Project("{category}") = "{name}", "{path}", "{identifier}"'


def _section(lines: list[str], name: str, timing: str, entries: list[str]) -> None:
    lines.append(f"\tGlobalSection({name}) = {timing}")
    lines.extend(f"\t\t{entry}" for entry in entries)
    lines.append("\tEndGlobalSection")


def _header(solution: Solution) -> list[str]:
    lines = [f"Microsoft Visual Studio Solution File, Format Version {solution.file_format_version}"]
    if solution.visual_studio_version:
        major = solution.visual_studio_version.split(".", 1)[0]
        lines.append(f"# Visual Studio Version {major}")
        lines.append(f"VisualStudioVersion = {solution.visual_studio_version}")
        lines.append(f"MinimumVisualStudioVersion = {MINIMUM_VISUAL_STUDIO_VERSION}")
    return lines


def render_solution(solution: Solution, solution_dir: str | None = None) -> str:
    """Render the full text of a solution file.

    Paths are written relative to solution_dir when given. Lines end with
    "\\n"; write_solution converts them on the way out.
    """
    lines = _header(solution)
    projects = sorted(solution.projects, key=lambda p: p.full_path)

    if solution.solution_items:
        identifier = format_identifier(project_types.SOLUTION_ITEMS_FOLDER)
        lines.append(_project_line(_FOLDER_CATEGORY, SOLUTION_ITEMS_NAME, SOLUTION_ITEMS_NAME, identifier))
        lines.append("\tProjectSection(SolutionItems) = preProject")
        for item in solution.solution_items:
            path = to_solution_path(item, solution_dir)
            lines.append(f"\t\t{path} = {path}")
        lines.append("\tEndProjectSection")
        lines.append("EndProject")

    for project in projects:
        lines.append(_project_line(
            format_identifier(project.category_id),
            project.name,
            to_solution_path(project.full_path, solution_dir),
            format_identifier(project.id),
        ))
        lines.append("EndProject")

    hierarchy = solution.hierarchy
    if hierarchy is not None:
        for folder in hierarchy.folders:
            identifier = format_identifier(folder.id)
            lines.append(_project_line(_FOLDER_CATEGORY, folder.name, folder.name, identifier))
            lines.append("EndProject")

    lines.append("Global")

    if hierarchy is not None and len(projects) > 1:
        pairs = hierarchy.nesting_graph().get_nested_pairs()
        if pairs:
            _section(lines, "NestedProjects", "preSolution", [
                f"{format_identifier(child)} = {format_identifier(parent)}" for child, parent in pairs
            ])

    matrix = solution.matrix
    if matrix is None:
        matrix = reconcile(
            projects,
            solution_configurations(projects, solution.configurations),
            solution_platforms(projects, solution.platforms),
        )

    _section(lines, "SolutionConfigurationPlatforms", "preSolution", [
        f"{c}|{p} = {c}|{p}" for c in matrix.configurations for p in matrix.platforms
    ])

    rows = []
    for entry in matrix.entries:
        prefix = f"{format_identifier(entry.project_id)}.{entry.key}"
        rows.append(f"{prefix}.ActiveCfg = {entry.configuration}|{entry.active_platform}")
        if entry.build:
            rows.append(f"{prefix}.Build.0 = {entry.configuration}|{entry.build_platform}")
        if entry.deploy:
            rows.append(f"{prefix}.Deploy.0 = {entry.configuration}|{entry.active_platform}")
    _section(lines, "ProjectConfigurationPlatforms", "postSolution", rows)

    _section(lines, "SolutionProperties", "preSolution", ["HideSolutionNode = FALSE"])
    _section(lines, "ExtensibilityGlobals", "postSolution", [
        f"SolutionGuid = {format_identifier(solution.solution_id)}"
    ])
    lines.append("EndGlobal")

    return "\n".join(lines) + "\n"


def write_solution(text: str, output_path: str) -> None:
    """Write solution text as UTF-8 with a byte order mark and CRLF line endings."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8-sig", newline="\r\n") as f:
        f.write(text)
    logger.debug(f"Wrote {os.path.abspath(output_path)}")
