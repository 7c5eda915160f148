"""Read .csproj/.vcxproj/... files (XML with MSBuild schema) into project records.

This is a static read: imports are not followed and conditions are not
evaluated. Values that appear in `'$(Configuration)|$(Platform)' == 'x|y'`
style conditions are collected as the conditioned values of those
properties, which is what the resolver falls back on.
"""

from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET

from slngen.config import ProjectRecord

logger = logging.getLogger(__name__)

# '$(Configuration)|$(Platform)' == 'Debug|AnyCPU'
_CONDITION_RE = re.compile(r"'\s*([^']*)\s*'\s*==\s*'\s*([^']*)\s*'")
_PROPERTY_REF_RE = re.compile(r"^\$\(\s*([A-Za-z_][\w.-]*)\s*\)$")

_NETSDK_PREFIX = "microsoft.net.sdk"


def _local_name(tag: str) -> str:
    return tag.split("}", 1)[1] if tag.startswith("{") else tag


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


def _metadata(item: ET.Element, name: str) -> str:
    """Item metadata, given either as an attribute or as a child element."""
    value = item.get(name)
    if value is not None:
        return value.strip()
    lowered = name.lower()
    for child in item:
        if _local_name(child.tag).lower() == lowered:
            return _text(child)
    return ""


def parse_condition(condition: str) -> dict[str, str]:
    """Map property names to the values a simple equality condition tests for.

    Only `'$(A)|$(B)' == 'x|y'` shaped comparisons are understood; empty
    values (the "not set" checks) are dropped.
    """
    result: dict[str, str] = {}
    for left, right in _CONDITION_RE.findall(condition):
        names = [part.strip() for part in left.split("|")]
        values = [part.strip() for part in right.split("|")]
        if len(names) != len(values):
            continue
        for name, value in zip(names, values):
            match = _PROPERTY_REF_RE.match(name)
            if match and value:
                result[match.group(1)] = value
    return result


def _add_conditioned(record: ProjectRecord, condition: str | None) -> None:
    if not condition:
        return
    for name, value in parse_condition(condition).items():
        values = record.conditioned_properties.setdefault(name, [])
        if value.lower() not in (v.lower() for v in values):
            values.append(value)


def _split_include(include: str) -> list[str]:
    return [part.strip() for part in include.split(";") if part.strip()]


def _apply_sdk(record: ProjectRecord, sdk: str) -> None:
    for name in _split_include(sdk):
        name = name.split("/", 1)[0].strip()
        if name.lower().startswith(_NETSDK_PREFIX):
            record.properties["UsingMicrosoftNETSdk"] = "true"
        else:
            # Any other SDK (SQL and friends) brings its own targets
            record.properties.setdefault("NETCoreTargetsPath", name)


def read_project(project_path: str) -> ProjectRecord:
    """Read a project file and return its record.

    Handles both SDK-style and legacy project formats. An unreadable or
    malformed file yields a record with only its path set.
    """
    full_path = os.path.normpath(os.path.abspath(project_path))
    record = ProjectRecord(full_path=full_path)
    project_dir = os.path.dirname(full_path)

    try:
        tree = ET.parse(full_path)
        root = tree.getroot()
    except (ET.ParseError, OSError) as e:
        logger.warning(f"Could not read project {full_path}: {e}")
        return record

    sdk = root.get("Sdk")
    if sdk:
        _apply_sdk(record, sdk)

    for element in root:
        name = _local_name(element.tag)

        if name == "Sdk" and element.get("Name"):
            _apply_sdk(record, element.get("Name", ""))

        elif name == "Import" and element.get("Sdk"):
            _apply_sdk(record, element.get("Sdk", ""))

        elif name == "PropertyGroup":
            group_condition = element.get("Condition")
            _add_conditioned(record, group_condition)
            for prop in element:
                if not isinstance(prop.tag, str):
                    continue
                prop_name = _local_name(prop.tag)
                prop_condition = prop.get("Condition")
                _add_conditioned(record, prop_condition)
                if group_condition:
                    continue
                if prop_condition:
                    # Default values like <Platform Condition="'$(Platform)' == ''">
                    record.properties.setdefault(prop_name, _text(prop))
                else:
                    record.properties[prop_name] = _text(prop)

        elif name == "ItemGroup":
            _add_conditioned(record, element.get("Condition"))
            for item in element:
                if not isinstance(item.tag, str):
                    continue
                _read_item(record, item, project_dir)

        elif name in ("Target", "ItemDefinitionGroup", "ImportGroup", "Choose"):
            _add_conditioned(record, element.get("Condition"))

    return record


def _read_item(record: ProjectRecord, item: ET.Element, project_dir: str) -> None:
    item_type = _local_name(item.tag)
    include = item.get("Include", "")

    if item_type == "ProjectConfiguration":
        configuration = _metadata(item, "Configuration")
        platform = _metadata(item, "Platform")
        if not (configuration and platform) and "|" in include:
            configuration, platform = (part.strip() for part in include.split("|", 1))
        if configuration and platform:
            record.project_configurations.append((configuration, platform))

    elif item_type == "SlnGenCustomProjectTypeGuid":
        for extension in _split_include(include):
            record.custom_project_type_guids[extension] = _metadata(item, "ProjectTypeGuid")

    elif item_type == "SlnGenSolutionItem":
        for path in _split_include(include):
            native = path.replace("\\", os.sep)
            record.solution_items.append(os.path.normpath(os.path.join(project_dir, native)))
