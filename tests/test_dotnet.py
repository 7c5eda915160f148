"""Tests for the project, manifest and solution file readers."""

from __future__ import annotations

import os
import tempfile
import uuid

import pytest

from slngen.dotnet.manifest import read_manifest, record_from_dict
from slngen.dotnet.project import parse_condition, read_project
from slngen.dotnet.solution import folder_chain_key, parse_solution, read_existing_solution
from slngen.errors import ManifestError
from slngen.identifiers import format_identifier, parse_identifier, try_parse_identifier
from slngen.paths import path_key, to_solution_path
from slngen.phases.resolve import get_configurations, get_custom_category_ids, get_platforms, resolve_project

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")
PROJECTS_DIR = os.path.join(FIXTURES_DIR, "projects")
MANIFESTS_DIR = os.path.join(FIXTURES_DIR, "manifests")


class TestIdentifiers:
    def test_parse_spellings(self):
        expected = uuid.UUID("5D9A8F3C-6E1B-4C2A-9B7D-0E4F1A2B3C4D")
        assert parse_identifier("{5D9A8F3C-6E1B-4C2A-9B7D-0E4F1A2B3C4D}") == expected
        assert parse_identifier("(5d9a8f3c-6e1b-4c2a-9b7d-0e4f1a2b3c4d)") == expected
        assert parse_identifier("5D9A8F3C6E1B4C2A9B7D0E4F1A2B3C4D") == expected

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_identifier("{5D9A8F3C}")
        assert try_parse_identifier("") is None
        assert try_parse_identifier("xyz") is None

    def test_format_upper_braced(self):
        value = uuid.UUID("5d9a8f3c-6e1b-4c2a-9b7d-0e4f1a2b3c4d")
        assert format_identifier(value) == "{5D9A8F3C-6E1B-4C2A-9B7D-0E4F1A2B3C4D}"


class TestPaths:
    def test_solution_path_relative_with_backslashes(self):
        solution_dir = os.path.join(os.sep, "repo")
        project = os.path.join(os.sep, "repo", "src", "App", "App.csproj")
        assert to_solution_path(project, solution_dir) == "src\\App\\App.csproj"

    def test_solution_path_parent_directory(self):
        solution_dir = os.path.join(os.sep, "repo", "sln")
        project = os.path.join(os.sep, "repo", "src", "App.csproj")
        assert to_solution_path(project, solution_dir) == "..\\src\\App.csproj"

    def test_path_key_case_insensitive(self):
        assert path_key("/Repo/App.csproj") == path_key("/repo/app.CSPROJ")


class TestParseCondition:
    def test_configuration_platform_pair(self):
        result = parse_condition(" '$(Configuration)|$(Platform)' == 'Debug|AnyCPU' ")
        assert result == {"Configuration": "Debug", "Platform": "AnyCPU"}

    def test_empty_values_dropped(self):
        assert parse_condition(" '$(Configuration)' == '' ") == {}

    def test_unrelated_condition(self):
        assert parse_condition("Exists('foo.props')") == {}


class TestReadProject:
    def test_sdk_project(self):
        record = read_project(os.path.join(PROJECTS_DIR, "src", "App", "App.csproj"))

        assert record.is_sdk_style
        assert record.get_property("SlnGenProjectName") == "App.Console"
        assert get_configurations(record) == ["Debug", "Release"]
        assert get_platforms(record) == ["Any CPU", "x64"]

    def test_custom_project_types_and_items(self):
        record = read_project(os.path.join(PROJECTS_DIR, "src", "App", "App.csproj"))

        custom = get_custom_category_ids(record)
        assert custom == {".foo": uuid.UUID("C139C737-2894-46A0-B1EB-DDD052FD8DCB")}
        assert os.path.join(PROJECTS_DIR, "README.md") in record.solution_items
        assert os.path.join(PROJECTS_DIR, "missing.txt") in record.solution_items

    def test_legacy_project(self):
        record = read_project(os.path.join(PROJECTS_DIR, "src", "Lib", "Lib.csproj"))

        assert not record.is_sdk_style
        assert record.get_property("ProjectGuid") == "{5D9A8F3C-6E1B-4C2A-9B7D-0E4F1A2B3C4D}"
        assert record.get_property("Configuration") == "Debug"
        assert record.get_property("SlnGenSolutionFolder") == "Libraries\\Core"
        assert record.get_conditioned_values("Configuration") == ["Debug", "Release"]
        assert record.get_conditioned_values("Platform") == ["AnyCPU", "x86"]
        # Properties from conditioned groups are not taken as plain values
        assert record.get_property("OutputPath") == ""

        project = resolve_project(record, {})
        assert project.id == uuid.UUID("5D9A8F3C-6E1B-4C2A-9B7D-0E4F1A2B3C4D")
        assert project.platforms == ["Any CPU", "x86"]

    def test_native_project(self):
        record = read_project(os.path.join(PROJECTS_DIR, "native", "Engine", "Engine.vcxproj"))

        assert record.project_configurations == [("Debug", "Win32"), ("Release", "Win32"), ("Release", "x64")]
        project = resolve_project(record, {})
        assert project.configurations == ["Debug", "Release"]
        assert project.platforms == ["Win32", "x64"]

    def test_traversal_project_excluded(self):
        record = read_project(os.path.join(PROJECTS_DIR, "build", "dirs.proj"))
        assert not record.is_sdk_style
        assert record.get_property("NETCoreTargetsPath") == "Microsoft.Build.Traversal"
        assert resolve_project(record, {}) is None

    def test_malformed_project(self):
        path = os.path.join(PROJECTS_DIR, "src", "Broken.csproj")
        record = read_project(path)
        assert record.full_path == os.path.abspath(path)
        assert record.properties == {}

    def test_missing_project(self):
        record = read_project(os.path.join(PROJECTS_DIR, "nope.csproj"))
        assert record.properties == {}


class TestManifest:
    def test_reads_projects(self):
        records = read_manifest(os.path.join(MANIFESTS_DIR, "repo.json"))

        assert len(records) == 5
        service = records[0]
        assert service.full_path == os.path.join(MANIFESTS_DIR, "repo", "src", "Service", "Service.csproj")
        assert service.name == "Service"
        assert service.is_sdk_style
        assert service.solution_items == [os.path.join(MANIFESTS_DIR, "repo", "build.props")]

    def test_configuration_pairs(self):
        records = read_manifest(os.path.join(MANIFESTS_DIR, "repo.json"))
        engine = records[2]
        assert engine.project_configurations == [("Debug", "Win32"), ("Release", "x64")]

    def test_not_a_list(self):
        with pytest.raises(ManifestError):
            read_manifest(os.path.join(MANIFESTS_DIR, "not_a_list.json"))

    def test_missing_path(self):
        with pytest.raises(ManifestError):
            read_manifest(os.path.join(MANIFESTS_DIR, "missing_path.json"))

    def test_invalid_json(self):
        with pytest.raises(ManifestError):
            read_manifest(os.path.join(MANIFESTS_DIR, "invalid.json"))

    def test_missing_file(self):
        with pytest.raises(ManifestError):
            read_manifest(os.path.join(MANIFESTS_DIR, "nope.json"))

    def test_bad_configuration_entry(self):
        with pytest.raises(ManifestError):
            record_from_dict({"full_path": "A.csproj", "project_configurations": ["Debug"]}, os.sep)

    def test_conditioned_value_must_be_a_list(self):
        data = {"full_path": "A/A.csproj", "conditioned_properties": {"Configuration": "Release"}}
        with pytest.raises(ManifestError, match="conditioned_properties.Configuration"):
            record_from_dict(data, os.sep)

    def test_conditioned_value_list(self):
        data = {"full_path": "A/A.csproj", "conditioned_properties": {"Configuration": ["Release"], "Platform": None}}
        record = record_from_dict(data, os.sep)
        assert record.conditioned_properties == {"Configuration": ["Release"], "Platform": []}
        assert get_configurations(record) == ["Release"]

    def test_name_must_be_a_string(self):
        with pytest.raises(ManifestError, match="name"):
            record_from_dict({"full_path": "A/A.csproj", "name": 42}, os.sep)


class TestParseSolution:
    def test_parses_projects_without_folders(self):
        projects = parse_solution(os.path.join(PROJECTS_DIR, "existing.sln"))

        assert [p.name for p in projects] == ["App", "Lib", "Gone"]
        assert projects[0].path == "src\\App\\App.csproj"
        assert not any(p.is_folder for p in projects)
        assert projects[0].project_guid == "11111111-2222-3333-4444-555555555555"
        assert projects[1].type_guid == "FAE04EC0-301F-11D3-BF4B-00C04F79EFBC"

    def test_include_folders(self):
        entries = parse_solution(os.path.join(PROJECTS_DIR, "existing.sln"), include_folders=True)

        assert [e.name for e in entries] == ["App", "Lib", "Gone", "src", "App"]
        assert [e.is_folder for e in entries] == [False, False, False, True, True]
        assert entries[3].project_guid == "BBBBBBBB-0000-0000-0000-000000000001"

    def test_missing_file(self):
        assert parse_solution(os.path.join(PROJECTS_DIR, "nope.sln")) == []


class TestReadExistingSolution:
    def test_recovers_ids(self):
        existing = read_existing_solution(os.path.join(PROJECTS_DIR, "existing.sln"))

        assert existing.solution_id == uuid.UUID("DEADBEEF-0000-4000-8000-000000000042")
        app = os.path.join(PROJECTS_DIR, "src", "App", "App.csproj")
        assert existing.ids[path_key(app)] == uuid.UUID("11111111-2222-3333-4444-555555555555")
        assert len(existing.ids) == 2

    def test_recovers_folder_chains(self):
        existing = read_existing_solution(os.path.join(PROJECTS_DIR, "existing.sln"))

        assert existing.folder_ids[folder_chain_key(["src"])] == uuid.UUID("BBBBBBBB-0000-0000-0000-000000000001")
        assert existing.folder_ids[folder_chain_key(["src", "App"])] == uuid.UUID("BBBBBBBB-0000-0000-0000-000000000002")

    def test_path_filter_injected(self):
        existing = read_existing_solution(os.path.join(PROJECTS_DIR, "existing.sln"), path_exists=lambda p: True)
        assert len(existing.ids) == 3

    def test_missing_file(self):
        assert read_existing_solution(os.path.join(PROJECTS_DIR, "nope.sln")) is None

    def test_garbage_content(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "junk.sln")
            with open(path, "w") as f:
                f.write("not a solution\nProject(broken\nSolutionGuid = {zzz}\n")
            existing = read_existing_solution(path)
            assert existing is not None
            assert existing.solution_id is None
            assert existing.ids == {}
