"""Phase 1: Turn evaluated project records into solution projects."""

from __future__ import annotations

import logging
import os
import uuid
from typing import Callable, Iterable

from slngen.config import GenerationConfig, Project, ProjectRecord, Solution
from slngen.dotnet import project_types
from slngen.errors import DuplicateIdentifier, DuplicateName, InvalidIdentifier, SlnGenError
from slngen.identifiers import IdentifierSource, new_identifier, parse_identifier, try_parse_identifier
from slngen.paths import normalize_path, path_key

logger = logging.getLogger(__name__)

DEFAULT_CONFIGURATION = "Debug"
DEFAULT_PLATFORM = "Any CPU"


def normalize_platform(platform: str) -> str:
    """Solution files spell AnyCPU as "Any CPU"."""
    if platform.strip().lower() == "anycpu":
        return "Any CPU"
    return platform


def unique_ci(values: Iterable[str]) -> list[str]:
    """Drop blanks and case-insensitive duplicates, keeping first spelling and order."""
    seen: set[str] = set()
    result = []
    for value in values:
        value = value.strip()
        if not value or value.lower() in seen:
            continue
        seen.add(value.lower())
        result.append(value)
    return result


def split_semicolon_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(";") if part.strip()]


def should_include(record: ProjectRecord) -> bool:
    """False for projects opted out of solutions and for traversal projects."""
    if record.get_property("IncludeInSolutionFile").strip().lower() == "false":
        return False
    if record.is_property_true("IsTraversal") or record.is_property_true("IsTraversalProject"):
        return False
    return True


def _possible_values(
    record: ProjectRecord, item_index: int, multi_property: str, single_property: str, default: str,
) -> list[str]:
    extension = record.extension.lower()
    if extension in (project_types.CPP_EXTENSION, project_types.AZURE_SERVICE_FABRIC_EXTENSION):
        from_items = unique_ci(pair[item_index] for pair in record.project_configurations)
        if from_items:
            return from_items

    if record.is_sdk_style:
        declared = split_semicolon_list(record.get_property(multi_property))
        if declared:
            return unique_ci(declared)

    conditioned = unique_ci(record.get_conditioned_values(single_property))
    if conditioned:
        return conditioned

    value = record.get_property(single_property).strip()
    if value:
        return [value]

    return [default]


def get_configurations(record: ProjectRecord) -> list[str]:
    return _possible_values(record, 0, "Configurations", "Configuration", DEFAULT_CONFIGURATION)


def get_platforms(record: ProjectRecord) -> list[str]:
    values = _possible_values(record, 1, "Platforms", "Platform", DEFAULT_PLATFORM)
    return unique_ci(normalize_platform(v) for v in values)


def get_is_deployable(record: ProjectRecord) -> bool:
    value = record.get_property("SlnGenIsDeployable").strip()
    if value.lower() == "true":
        return True
    return not value and record.extension.lower() == project_types.AZURE_SERVICE_FABRIC_EXTENSION


def get_project_id(record: ProjectRecord, new_id: IdentifierSource = new_identifier) -> uuid.UUID:
    """SDK-style projects always get a fresh id; legacy ones must declare a valid one or none."""
    if record.is_sdk_style:
        return new_id()

    value = record.get_property("ProjectGuid").strip()
    if not value:
        return new_id()

    try:
        return parse_identifier(value)
    except ValueError:
        raise InvalidIdentifier(value, new_id(), record.full_path) from None


def get_category_id(
    extension: str, is_sdk_style: bool, custom_category_ids: dict[str, uuid.UUID], is_sql_sdk: bool = False,
) -> uuid.UUID:
    custom = custom_category_ids.get(extension.lower())
    if custom is not None:
        return custom

    fixed = project_types.lookup(project_types.KNOWN_FIXED, extension)
    if fixed is not None:
        return fixed

    if is_sdk_style:
        return project_types.lookup(project_types.KNOWN_NETSDK, extension) or project_types.DEFAULT_NETSDK

    if is_sql_sdk:
        sql = project_types.lookup(project_types.KNOWN_NETSDK, extension)
        if sql is not None:
            return sql

    return project_types.lookup(project_types.KNOWN_LEGACY, extension) or project_types.DEFAULT_LEGACY


def get_custom_category_ids(record: ProjectRecord) -> dict[str, uuid.UUID]:
    """Custom category ids declared by the main project, keyed by lower-case extension."""
    result: dict[str, uuid.UUID] = {}
    for extension, raw_id in record.custom_project_type_guids.items():
        extension = extension.strip()
        # Only file extensions are meaningful keys
        if not extension.startswith("."):
            continue
        category_id = try_parse_identifier((raw_id or "").strip())
        if category_id is None:
            logger.debug(f"Ignoring custom project type {extension}: invalid GUID {raw_id!r}")
            continue
        result[extension.lower()] = category_id
    return result


def resolve_project(
    record: ProjectRecord,
    custom_category_ids: dict[str, uuid.UUID],
    is_primary: bool = False,
    is_buildable: bool = True,
    new_id: IdentifierSource = new_identifier,
) -> Project | None:
    """Build the solution entry for a record, or None when it is excluded.

    Raises InvalidIdentifier when a legacy project declares a malformed
    ProjectGuid.
    """
    if not should_include(record):
        logger.debug(f"Excluding {record.full_path} from the solution")
        return None

    full_path = normalize_path(record.full_path)
    extension = record.extension

    name = (
        record.get_property("SlnGenProjectName").strip()
        or (record.name or "").strip()
        or os.path.splitext(os.path.basename(full_path))[0]
    )

    return Project(
        full_path=full_path,
        name=name,
        id=get_project_id(record, new_id),
        category_id=get_category_id(
            extension,
            record.is_sdk_style,
            custom_category_ids,
            is_sql_sdk=bool(record.get_property("NETCoreTargetsPath")),
        ),
        configurations=get_configurations(record),
        platforms=get_platforms(record),
        is_primary=is_primary,
        is_deployable=get_is_deployable(record),
        is_buildable=is_buildable,
        is_shared=extension.lower() in project_types.SHARED_PROJECT_EXTENSIONS,
        solution_folder=record.get_property("SlnGenSolutionFolder").strip(),
    )


def collect_solution_items(
    records: Iterable[ProjectRecord], file_exists: Callable[[str], bool] = os.path.isfile,
) -> list[str]:
    """Distinct solution item paths across all records, skipping missing files."""
    items: list[str] = []
    seen: set[str] = set()
    for record in records:
        for item in record.solution_items:
            if not item or not item.strip():
                continue
            full = normalize_path(item)
            if not file_exists(full):
                logger.debug(f'The solution item "{full}" does not exist and will not be added to the solution.')
                continue
            key = path_key(full)
            if key not in seen:
                seen.add(key)
                items.append(full)
    return items


def find_duplicates(projects: list[Project]) -> list[SlnGenError]:
    """Report ids and names shared by more than one project."""
    by_id: dict[uuid.UUID, list[str]] = {}
    by_name: dict[str, list[Project]] = {}
    for project in projects:
        by_id.setdefault(project.id, []).append(project.full_path)
        by_name.setdefault(project.name.lower(), []).append(project)

    diagnostics: list[SlnGenError] = []
    for identifier, paths in by_id.items():
        if len(paths) > 1:
            diagnostics.append(DuplicateIdentifier(identifier, paths))
    for same_name in by_name.values():
        if len(same_name) > 1:
            diagnostics.append(DuplicateName(same_name[0].name, [p.full_path for p in same_name]))
    return diagnostics


def run_resolve_phase(
    config: GenerationConfig,
    records: list[ProjectRecord],
    solution: Solution,
    new_id: IdentifierSource = new_identifier,
    file_exists: Callable[[str], bool] = os.path.isfile,
) -> list[SlnGenError]:
    """Resolve all records into solution.projects. Returns per-project errors."""
    errors: list[SlnGenError] = []

    unique_records: list[ProjectRecord] = []
    seen: set[str] = set()
    for record in records:
        key = path_key(record.full_path)
        if key in seen:
            continue
        seen.add(key)
        unique_records.append(record)

    if not unique_records:
        return errors

    main_record = unique_records[0]
    custom_category_ids = get_custom_category_ids(main_record)
    for extension, category_id in custom_category_ids.items():
        logger.debug(f"Custom project type GUID: {extension} = {category_id}")

    main_key = None if config.ignore_main_project else path_key(main_record.full_path)

    for record in unique_records:
        try:
            project = resolve_project(
                record,
                custom_category_ids,
                is_primary=path_key(record.full_path) == main_key,
                is_buildable=config.is_buildable,
                new_id=new_id,
            )
        except InvalidIdentifier as e:
            logger.error(str(e))
            errors.append(e)
            continue
        if project is not None:
            solution.projects.append(project)

    solution.solution_items = collect_solution_items(unique_records, file_exists)
    solution.configurations = unique_ci(config.configurations)
    solution.platforms = unique_ci(normalize_platform(p) for p in config.platforms)

    return errors
