"""Tests for solution rendering and writing."""

from __future__ import annotations

import itertools
import os
import tempfile
import uuid

from slngen.config import GenerationConfig, Project, Solution
from slngen.dotnet import project_types
from slngen.output import render_solution, write_solution
from slngen.phases.hierarchy import run_hierarchy_phase
from slngen.phases.reconcile import run_reconcile_phase

ROOT = os.path.join(os.sep, "root")
SOLUTION_ID = uuid.UUID("DEADBEEF-0000-4000-8000-000000000042")


def _sequential_ids(start: int = 100):
    counter = itertools.count(start)
    return lambda: uuid.UUID(int=next(counter))


def _scenario_projects() -> list[Project]:
    return [
        Project(
            full_path=os.path.join(ROOT, "A", "A.proj"), name="A", id=uuid.UUID(int=1),
            category_id=project_types.NETSDK_CSHARP, configurations=["Debug", "Release"], platforms=["x64"],
        ),
        Project(
            full_path=os.path.join(ROOT, "B", "A.proj"), name="A", id=uuid.UUID(int=2),
            category_id=project_types.NETSDK_CSHARP, configurations=["Debug", "Release"], platforms=["x64"],
        ),
    ]


def _render(solution: Solution, config: GenerationConfig, solution_dir: str | None = ROOT) -> str:
    run_hierarchy_phase(config, solution, _sequential_ids())
    run_reconcile_phase(config, solution)
    return render_solution(solution, solution_dir)


class TestRenderSolution:
    def test_minimal_solution_exact_text(self):
        project = Project(
            full_path=os.path.join(ROOT, "App", "App.csproj"), name="App", id=uuid.UUID(int=1),
            category_id=project_types.NETSDK_CSHARP,
        )
        solution = Solution(projects=[project], solution_id=SOLUTION_ID)
        text = _render(solution, GenerationConfig())

        assert text == (
            "Microsoft Visual Studio Solution File, Format Version 12.00\n"
            'Project("{9A19103F-16F7-4668-BE54-9A1E7A4F7556}") = "App", "App\\App.csproj", '
            '"{00000000-0000-0000-0000-000000000001}"\n'
            "EndProject\n"
            "Global\n"
            "\tGlobalSection(SolutionConfigurationPlatforms) = preSolution\n"
            "\t\tDebug|Any CPU = Debug|Any CPU\n"
            "\tEndGlobalSection\n"
            "\tGlobalSection(ProjectConfigurationPlatforms) = postSolution\n"
            "\t\t{00000000-0000-0000-0000-000000000001}.Debug|Any CPU.ActiveCfg = Debug|Any CPU\n"
            "\t\t{00000000-0000-0000-0000-000000000001}.Debug|Any CPU.Build.0 = Debug|Any CPU\n"
            "\tEndGlobalSection\n"
            "\tGlobalSection(SolutionProperties) = preSolution\n"
            "\t\tHideSolutionNode = FALSE\n"
            "\tEndGlobalSection\n"
            "\tGlobalSection(ExtensibilityGlobals) = postSolution\n"
            "\t\tSolutionGuid = {DEADBEEF-0000-4000-8000-000000000042}\n"
            "\tEndGlobalSection\n"
            "EndGlobal\n"
        )

    def test_deterministic(self):
        first = _render(Solution(projects=_scenario_projects(), solution_id=SOLUTION_ID), GenerationConfig(use_folders=True))
        second = _render(Solution(projects=_scenario_projects(), solution_id=SOLUTION_ID), GenerationConfig(use_folders=True))
        assert first == second

    def test_projects_sorted_by_path(self):
        projects = list(reversed(_scenario_projects()))
        text = _render(Solution(projects=projects, solution_id=SOLUTION_ID), GenerationConfig())
        assert text.index('"A\\A.proj"') < text.index('"B\\A.proj"')

    def test_scenario_with_folders(self):
        text = _render(Solution(projects=_scenario_projects(), solution_id=SOLUTION_ID), GenerationConfig(use_folders=True))
        lines = text.splitlines()

        folder_lines = [l for l in lines if l.startswith('Project("{2150E333-8FDC-42A3-9474-1A3956D46DE8}")')]
        assert len(folder_lines) == 2
        assert any('= "A", "A"' in l for l in folder_lines)
        assert any('= "B", "B"' in l for l in folder_lines)

        start = lines.index("\tGlobalSection(NestedProjects) = preSolution")
        end = lines.index("\tEndGlobalSection", start)
        nested = lines[start + 1:end]
        assert len(nested) == 2
        assert any(l.startswith("\t\t{00000000-0000-0000-0000-000000000001} = ") for l in nested)
        assert any(l.startswith("\t\t{00000000-0000-0000-0000-000000000002} = ") for l in nested)

        assert "\t\tDebug|x64 = Debug|x64" in lines
        assert "\t\tRelease|x64 = Release|x64" in lines
        assert not any("Any CPU" in l for l in lines)

    def test_section_order(self):
        text = _render(Solution(projects=_scenario_projects(), solution_id=SOLUTION_ID), GenerationConfig(use_folders=True))
        order = [
            "GlobalSection(NestedProjects)",
            "GlobalSection(SolutionConfigurationPlatforms)",
            "GlobalSection(ProjectConfigurationPlatforms)",
            "GlobalSection(SolutionProperties)",
            "GlobalSection(ExtensibilityGlobals)",
        ]
        positions = [text.index(name) for name in order]
        assert positions == sorted(positions)
        assert text.index("EndProject\nGlobal\n") > 0

    def test_no_nested_projects_without_folders(self):
        text = _render(Solution(projects=_scenario_projects(), solution_id=SOLUTION_ID), GenerationConfig())
        assert "NestedProjects" not in text
        assert "2150E333" not in text

    def test_no_nested_projects_for_single_project(self):
        projects = _scenario_projects()[:1]
        solution = Solution(projects=projects, solution_id=SOLUTION_ID)
        solution.projects[0].solution_folder = "Tools"
        text = _render(solution, GenerationConfig())
        assert "NestedProjects" not in text

    def test_solution_items_block(self):
        solution = Solution(
            projects=_scenario_projects(),
            solution_items=[os.path.join(ROOT, "README.md"), os.path.join(ROOT, "build", "common.props")],
            solution_id=SOLUTION_ID,
        )
        text = _render(solution, GenerationConfig())

        assert (
            'Project("{2150E333-8FDC-42A3-9474-1A3956D46DE8}") = "Solution Items", "Solution Items", '
            '"{B283EBC2-E01F-412D-9339-FD56EF114549}"\n'
            "\tProjectSection(SolutionItems) = preProject\n"
            "\t\tREADME.md = README.md\n"
            "\t\tbuild\\common.props = build\\common.props\n"
            "\tEndProjectSection\n"
            "EndProject\n"
        ) in text
        assert text.index("Solution Items") < text.index('"A\\A.proj"')

    def test_build_line_suppressed(self):
        project = Project(
            full_path=os.path.join(ROOT, "P", "P.csproj"), name="P", id=uuid.UUID(int=7),
            category_id=project_types.NETSDK_CSHARP, configurations=["Release"], platforms=["x64"],
        )
        solution = Solution(projects=[project], configurations=["Debug"], platforms=["Any CPU"], solution_id=SOLUTION_ID)
        text = _render(solution, GenerationConfig())

        assert "\t\t{00000000-0000-0000-0000-000000000007}.Debug|Any CPU.ActiveCfg = Release|x64\n" in text
        assert ".Build.0" not in text

    def test_deploy_line(self):
        project = Project(
            full_path=os.path.join(ROOT, "S", "S.sfproj"), name="S", id=uuid.UUID(int=8),
            category_id=project_types.AZURE_SERVICE_FABRIC, platforms=["x64"], is_deployable=True,
        )
        solution = Solution(projects=[project], configurations=["Debug", "Release"], platforms=["x86"], solution_id=SOLUTION_ID)
        text = _render(solution, GenerationConfig())

        deploy = [l for l in text.splitlines() if ".Deploy.0" in l]
        assert len(deploy) == 2
        assert "\t\t{00000000-0000-0000-0000-000000000008}.Debug|x86.Deploy.0 = Debug|x64" in text.splitlines()

    def test_visual_studio_version_header(self):
        solution = Solution(projects=_scenario_projects(), solution_id=SOLUTION_ID, visual_studio_version="17.8.34330.188")
        text = _render(solution, GenerationConfig())
        assert text.startswith(
            "Microsoft Visual Studio Solution File, Format Version 12.00\n"
            "# Visual Studio Version 17\n"
            "VisualStudioVersion = 17.8.34330.188\n"
            "MinimumVisualStudioVersion = 10.0.40219.1\n"
        )

    def test_full_paths_without_solution_dir(self):
        text = _render(Solution(projects=_scenario_projects(), solution_id=SOLUTION_ID), GenerationConfig(), None)
        expected = os.path.join(ROOT, "A", "A.proj").replace("/", "\\")
        assert f'"{expected}"' in text

    def test_shared_project_has_no_rows(self):
        shared = Project(
            full_path=os.path.join(ROOT, "S", "S.shproj"), name="S", id=uuid.UUID(int=9),
            category_id=project_types.SHARED_PROJECT, is_shared=True,
        )
        solution = Solution(projects=_scenario_projects() + [shared], solution_id=SOLUTION_ID)
        text = _render(solution, GenerationConfig())
        assert '"S", "S\\S.shproj"' in text
        assert "{00000000-0000-0000-0000-000000000009}." not in text


class TestWriteSolution:
    def test_bom_and_crlf(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "nested", "dir", "App.sln")
            write_solution("Global\nEndGlobal\n", path)

            with open(path, "rb") as f:
                data = f.read()
            assert data == b"\xef\xbb\xbfGlobal\r\nEndGlobal\r\n"

    def test_overwrites_existing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "App.sln")
            write_solution("one\n", path)
            write_solution("two\n", path)
            with open(path, "r", encoding="utf-8-sig") as f:
                assert f.read() == "two\n"
