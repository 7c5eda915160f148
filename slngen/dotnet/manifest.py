"""Read JSON manifests of already-evaluated projects.

A manifest is either a list of record objects or an object with a
``projects`` list::

    {
      "projects": [
        {
          "full_path": "src/App/App.csproj",
          "name": "App",
          "properties": {"UsingMicrosoftNETSdk": "true", "Platforms": "x64"},
          "conditioned_properties": {"Configuration": ["Debug", "Release"]},
          "project_configurations": ["Debug|x64", ["Release", "x64"]],
          "custom_project_type_guids": {".foo": "{C139C737-...}"},
          "solution_items": ["../README.md"]
        }
      ]
    }

Relative paths are resolved against the manifest's directory, except
solution items, which are resolved against their project's directory.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from slngen.config import ProjectRecord
from slngen.errors import ManifestError

logger = logging.getLogger(__name__)


def _string_map(value: Any, field_name: str, source: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestError(f"{source}: '{field_name}' must be an object")
    return {str(k): "" if v is None else str(v) for k, v in value.items()}


def _configuration_pairs(value: Any, source: str) -> list[tuple[str, str]]:
    pairs = []
    for entry in value or []:
        if isinstance(entry, str) and "|" in entry:
            configuration, platform = entry.split("|", 1)
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            configuration, platform = entry
        else:
            raise ManifestError(f"{source}: invalid project configuration {entry!r}")
        pairs.append((str(configuration).strip(), str(platform).strip()))
    return pairs


def record_from_dict(data: dict[str, Any], base_dir: str, source: str = "<manifest>") -> ProjectRecord:
    """Build a ProjectRecord from one manifest entry."""
    if not isinstance(data, dict):
        raise ManifestError(f"{source}: project entries must be objects, got {type(data).__name__}")

    raw_path = data.get("full_path") or data.get("path")
    if not raw_path or not isinstance(raw_path, str):
        raise ManifestError(f"{source}: project entry is missing 'full_path'")

    full_path = os.path.normpath(os.path.join(base_dir, raw_path))
    project_dir = os.path.dirname(full_path)

    name = data.get("name")
    if name is not None and not isinstance(name, str):
        raise ManifestError(f"{source}: 'name' must be a string")

    conditioned = data.get("conditioned_properties") or {}
    if not isinstance(conditioned, dict):
        raise ManifestError(f"{source}: 'conditioned_properties' must be an object")
    for key, values in conditioned.items():
        if values is not None and not isinstance(values, list):
            raise ManifestError(f"{source}: 'conditioned_properties.{key}' must be a list")

    items = data.get("solution_items") or []
    if not isinstance(items, list):
        raise ManifestError(f"{source}: 'solution_items' must be a list")

    return ProjectRecord(
        full_path=full_path,
        name=name,
        properties=_string_map(data.get("properties"), "properties", source),
        conditioned_properties={
            str(k): [str(v) for v in (values or [])] for k, values in conditioned.items()
        },
        project_configurations=_configuration_pairs(data.get("project_configurations"), source),
        custom_project_type_guids=_string_map(
            data.get("custom_project_type_guids"), "custom_project_type_guids", source,
        ),
        solution_items=[
            os.path.normpath(os.path.join(project_dir, str(item).replace("\\", os.sep)))
            for item in items
        ],
    )


def read_manifest(manifest_path: str) -> list[ProjectRecord]:
    """Read a manifest file. Raises ManifestError on malformed content."""
    full_path = os.path.abspath(manifest_path)
    try:
        with open(full_path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except OSError as e:
        raise ManifestError(f"Could not read manifest {full_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"{full_path}: invalid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("projects")
    if not isinstance(data, list):
        raise ManifestError(f"{full_path}: expected a list of projects")

    base_dir = os.path.dirname(full_path)
    records = [record_from_dict(entry, base_dir, full_path) for entry in data]
    logger.debug(f"Read {len(records)} project(s) from {full_path}")
    return records
