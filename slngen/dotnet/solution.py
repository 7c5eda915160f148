"""Parse .sln files (custom text format, not XML)."""

from __future__ import annotations

import logging
import os
import re
import uuid
from dataclasses import dataclass, field
from typing import Callable

from slngen.dotnet import project_types
from slngen.identifiers import try_parse_identifier
from slngen.paths import from_solution_path, path_key

logger = logging.getLogger(__name__)


@dataclass
class SolutionProject:
    """A project entry from a .sln file."""
    type_guid: str
    name: str
    path: str
    project_guid: str

    @property
    def is_folder(self) -> bool:
        return self.type_guid == _SOLUTION_FOLDER_GUID


@dataclass
class ExistingSolution:
    """Identifiers recovered from a previously written solution."""
    solution_id: uuid.UUID | None = None
    # project path key -> id
    ids: dict[str, uuid.UUID] = field(default_factory=dict)
    # folder name chain key ("src\\app", casefolded) -> id
    folder_ids: dict[str, uuid.UUID] = field(default_factory=dict)


# Project("{TYPE-GUID}") = "Name", "Path\To\Project.csproj", "{PROJECT-GUID}"
_PROJECT_RE = re.compile(
    r'^Project\(\"\{([^}]+)\}\"\)\s*=\s*\"([^\"]+)\"\s*,\s*\"([^\"]+)\"\s*,\s*\"\{([^}]+)\}\"'
)

# {CHILD-GUID} = {PARENT-GUID}
_NESTED_RE = re.compile(r"^\s*\{([^}]+)\}\s*=\s*\{([^}]+)\}\s*$")
_SOLUTION_GUID_RE = re.compile(r"^\s*SolutionGuid\s*=\s*\{([^}]+)\}\s*$")
_SECTION_RE = re.compile(r"^\s*GlobalSection\((\w+)\)")

_SOLUTION_FOLDER_GUID = str(project_types.SOLUTION_FOLDER).upper()


def _read_lines(sln_path: str) -> list[str] | None:
    try:
        with open(sln_path, "r", encoding="utf-8-sig") as f:
            return f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not read solution {sln_path}: {e}")
        return None


def _match_project(line: str) -> SolutionProject | None:
    match = _PROJECT_RE.match(line)
    if match is None:
        return None
    return SolutionProject(
        type_guid=match.group(1).upper(),
        name=match.group(2),
        path=match.group(3),
        project_guid=match.group(4).upper(),
    )


def parse_solution(sln_path: str, include_folders: bool = False) -> list[SolutionProject]:
    """Project entries of a .sln file in file order.

    Solution folders are skipped unless include_folders is set. A missing or
    unreadable file yields an empty list.
    """
    entries = (_match_project(line) for line in _read_lines(sln_path) or [])
    return [e for e in entries if e is not None and (include_folders or not e.is_folder)]


def folder_chain_key(names: list[str]) -> str:
    """Lookup key of a solution folder given its names from the top down."""
    return "\\".join(names).casefold()


def read_existing_solution(
    sln_path: str,
    path_exists: Callable[[str], bool] = os.path.exists,
) -> ExistingSolution | None:
    """Recover the solution id and previously assigned ids from a solution file.

    Returns None when the file is missing or unreadable. Entries that do not
    parse, or whose project no longer exists, are skipped.
    """
    lines = _read_lines(sln_path)
    if lines is None:
        return None

    solution_dir = os.path.dirname(os.path.abspath(sln_path))
    existing = ExistingSolution()
    folder_names: dict[uuid.UUID, str] = {}
    parents: dict[uuid.UUID, uuid.UUID] = {}
    section = None

    for line in lines:
        entry = _match_project(line)
        if entry is not None:
            project_id = try_parse_identifier(entry.project_guid)
            if project_id is None:
                continue
            if entry.is_folder:
                folder_names[project_id] = entry.name
                continue
            full_path = from_solution_path(entry.path, solution_dir)
            if path_exists(full_path):
                existing.ids[path_key(full_path)] = project_id
            continue

        section_match = _SECTION_RE.match(line)
        if section_match:
            section = section_match.group(1)
            continue
        if line.strip() == "EndGlobalSection":
            section = None
            continue

        if section == "NestedProjects":
            nested = _NESTED_RE.match(line)
            if nested:
                child = try_parse_identifier(nested.group(1))
                parent = try_parse_identifier(nested.group(2))
                if child is not None and parent is not None:
                    parents[child] = parent
        elif section == "ExtensibilityGlobals":
            guid_match = _SOLUTION_GUID_RE.match(line)
            if guid_match:
                existing.solution_id = try_parse_identifier(guid_match.group(1))

    for folder_id in folder_names:
        chain = []
        current: uuid.UUID | None = folder_id
        visited = set()
        while current in folder_names and current not in visited:
            visited.add(current)
            chain.append(folder_names[current])
            current = parents.get(current)
        existing.folder_ids[folder_chain_key(list(reversed(chain)))] = folder_id

    logger.debug(
        f"Existing solution {sln_path}: {len(existing.ids)} project id(s), "
        f"{len(existing.folder_ids)} folder id(s)"
    )
    return existing
