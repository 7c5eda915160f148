"""Sequential phase orchestrator with timing."""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone
from typing import Callable

from slngen import __version__
from slngen.config import GenerationConfig, GenerationResult, ProjectRecord, Solution
from slngen.dotnet.manifest import read_manifest
from slngen.dotnet.project import read_project
from slngen.dotnet.solution import ExistingSolution, read_existing_solution
from slngen.identifiers import IdentifierSource, new_identifier
from slngen.output import render_solution, write_solution
from slngen.paths import normalize_path, path_key
from slngen.phases.hierarchy import run_hierarchy_phase
from slngen.phases.reconcile import run_reconcile_phase
from slngen.phases.resolve import find_duplicates, run_resolve_phase

logger = logging.getLogger(__name__)

_PHASE_LABELS = {
    "resolve": "Resolving projects",
    "reuse": "Reading existing solution",
    "hierarchy": "Building folder hierarchy",
    "reconcile": "Reconciling configurations",
    "render": "Rendering solution",
    "write": "Writing solution file",
}


def load_records(inputs: list[str]) -> list[ProjectRecord]:
    """Read project files and JSON manifests, in the order given."""
    records: list[ProjectRecord] = []
    for path in inputs:
        if path.lower().endswith(".json"):
            records.extend(read_manifest(path))
        else:
            records.append(read_project(path))
    return records


def default_output_path(solution: Solution) -> str | None:
    """<first project dir>/<first project name>.sln"""
    if not solution.projects:
        return None
    first = solution.projects[0]
    return os.path.join(first.directory, f"{first.name}.sln")


def _apply_existing(solution: Solution, existing: ExistingSolution | None, new_id: IdentifierSource) -> None:
    if existing is None:
        solution.solution_id = new_id()
        return

    solution.solution_id = existing.solution_id or new_id()
    reused = 0
    for project in solution.projects:
        previous = existing.ids.get(path_key(project.full_path))
        if previous is not None:
            project.id = previous
            reused += 1
    logger.debug(f"Reused {reused} project id(s)")


def run_pipeline(
    config: GenerationConfig,
    records: list[ProjectRecord],
    progress_callback=None,
    new_id: IdentifierSource = new_identifier,
    file_exists: Callable[[str], bool] = os.path.isfile,
) -> GenerationResult:
    """Execute the generation phases and return the result.

    Args:
        config: Generation configuration.
        records: Evaluated project records; the first one is the main project.
        progress_callback: Optional callable(phase_name, label) invoked
            when each phase starts. Used by the CLI for Rich progress.
        new_id: Source of fresh identifiers.
        file_exists: Existence check for solution items.
    """
    solution = Solution(
        configurations=list(config.configurations),
        platforms=list(config.platforms),
        visual_studio_version=config.visual_studio_version,
        file_format_version=config.file_format_version,
    )
    result = GenerationResult()
    timings: dict[str, float] = {}
    total_start = time.monotonic()
    state: dict = {"existing": None, "folder_ids": {}}

    def resolve() -> None:
        result.errors.extend(run_resolve_phase(config, records, solution, new_id, file_exists))
        result.solution_path = normalize_path(config.output_path) if config.output_path else default_output_path(solution)

    def reuse() -> None:
        existing = None
        if config.reuse_existing and result.solution_path:
            existing = read_existing_solution(result.solution_path)
        _apply_existing(solution, existing, new_id)
        if existing is not None:
            state["folder_ids"] = existing.folder_ids
        for warning in find_duplicates(solution.projects):
            logger.warning(str(warning))
            result.warnings.append(warning)

    def hierarchy() -> None:
        run_hierarchy_phase(config, solution, new_id, state["folder_ids"])

    def reconcile() -> None:
        run_reconcile_phase(config, solution)

    def render() -> None:
        solution_dir = os.path.dirname(result.solution_path) if result.solution_path else None
        result.text = render_solution(solution, solution_dir)

    def write() -> None:
        if result.solution_path:
            write_solution(result.text, result.solution_path)
            result.written = True

    phases = [
        ("resolve", resolve),
        ("reuse", reuse),
        ("hierarchy", hierarchy),
        ("reconcile", reconcile),
        ("render", render),
        ("write", write),
    ]

    for name, phase_fn in phases:
        if progress_callback:
            progress_callback(name, _PHASE_LABELS.get(name, name))
        start = time.monotonic()
        phase_fn()
        timings[name] = time.monotonic() - start

        if name == "resolve" and (result.errors or not solution.projects):
            if not solution.projects:
                logger.warning("No projects to add to the solution")
            break

    total_ms = (time.monotonic() - total_start) * 1000

    result.metadata = {
        "solution_path": result.solution_path,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "slngen_version": __version__,
        "duration_ms": round(total_ms, 1),
        "phase_timings": timings,
    }
    result.stats = _build_stats(solution)
    return result


def _build_stats(solution: Solution) -> dict:
    matrix = solution.matrix
    return {
        "projects": len(solution.projects),
        "folders": len(solution.hierarchy.folders) if solution.hierarchy else 0,
        "solution_items": len(solution.solution_items),
        "configurations": list(matrix.configurations) if matrix else [],
        "platforms": list(matrix.platforms) if matrix else [],
        "matrix_entries": len(matrix.entries) if matrix else 0,
        "build_entries": matrix.build_count if matrix else 0,
        "deploy_entries": matrix.deploy_count if matrix else 0,
        "exact_matches": matrix.exact_matches if matrix else 0,
        "configuration_fallbacks": matrix.configuration_fallbacks if matrix else 0,
        "platform_fallbacks": matrix.platform_fallbacks if matrix else 0,
        "unmatched_platforms": matrix.unmatched_platforms if matrix else 0,
    }
