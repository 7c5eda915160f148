"""Phase 3: Configuration/platform reconciliation.

For every project and every solution (configuration, platform) pair, pick
the project configuration and platform the IDE should activate, and decide
whether the project builds and deploys for that pair.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from slngen.config import GenerationConfig, Project, Solution
from slngen.phases.resolve import DEFAULT_PLATFORM, normalize_platform, unique_ci

logger = logging.getLogger(__name__)

# Canonical spelling of the platforms a solution may advertise
SOLUTION_PLATFORMS = {"any cpu": "Any CPU", "x64": "x64", "x86": "x86"}

# Candidates tried, in order, when a project lacks the solution platform
PLATFORM_FALLBACKS = {
    "any cpu": ("x64", "x86", "amd64", "Win32"),
    "x86": ("Win32", "Any CPU"),
    "x64": ("amd64", "Any CPU"),
}


@dataclass
class ConfigurationMatch:
    configuration: str
    matched: bool


@dataclass
class PlatformMatch:
    active: str
    build: str | None
    matched: bool
    fallback: bool = False


@dataclass
class MatrixEntry:
    """One (project, solution configuration, solution platform) decision."""
    project_id: uuid.UUID
    solution_configuration: str
    solution_platform: str
    configuration: str
    active_platform: str
    build_platform: str | None
    build: bool
    deploy: bool

    @property
    def key(self) -> str:
        return f"{self.solution_configuration}|{self.solution_platform}"


@dataclass
class ConfigurationMatrix:
    configurations: list[str] = field(default_factory=list)
    platforms: list[str] = field(default_factory=list)
    entries: list[MatrixEntry] = field(default_factory=list)
    exact_matches: int = 0
    configuration_fallbacks: int = 0
    platform_fallbacks: int = 0
    unmatched_platforms: int = 0

    @property
    def build_count(self) -> int:
        return sum(1 for e in self.entries if e.build)

    @property
    def deploy_count(self) -> int:
        return sum(1 for e in self.entries if e.deploy)


def _sorted_ci(values: list[str]) -> list[str]:
    return sorted(values, key=lambda v: (v.lower(), v))


def solution_configurations(projects: list[Project], overrides: list[str] | None = None) -> list[str]:
    """The override when given, else every project configuration, sorted."""
    if overrides:
        explicit = unique_ci(overrides)
        if explicit:
            return explicit
    return _sorted_ci(unique_ci(c for p in projects for c in p.configurations))


def solution_platforms(projects: list[Project], overrides: list[str] | None = None) -> list[str]:
    """The override when given, else the canonical platforms projects use, sorted."""
    if overrides:
        explicit = unique_ci(normalize_platform(p) for p in overrides)
        if explicit:
            return explicit

    inferred = unique_ci(
        SOLUTION_PLATFORMS[normalize_platform(p).lower()]
        for project in projects
        for p in project.platforms
        if normalize_platform(p).lower() in SOLUTION_PLATFORMS
    )
    return _sorted_ci(inferred) or [DEFAULT_PLATFORM]


def match_configuration(solution_configuration: str, project: Project) -> ConfigurationMatch:
    wanted = solution_configuration.lower()
    for configuration in project.configurations:
        if configuration.lower() == wanted:
            return ConfigurationMatch(solution_configuration, True)
    first = project.configurations[0] if project.configurations else solution_configuration
    return ConfigurationMatch(first, False)


def match_platform(solution_platform: str, project: Project) -> PlatformMatch:
    wanted = normalize_platform(solution_platform).lower()
    declared = {normalize_platform(p).lower() for p in project.platforms}

    if wanted in declared:
        return PlatformMatch(solution_platform, solution_platform, True)

    for candidate in PLATFORM_FALLBACKS.get(wanted, ()):
        if candidate.lower() in declared:
            return PlatformMatch(candidate, candidate, True, fallback=True)

    first = normalize_platform(project.platforms[0]) if project.platforms else DEFAULT_PLATFORM
    return PlatformMatch(first, None, False)


def reconcile(
    projects: list[Project],
    configurations: list[str],
    platforms: list[str],
) -> ConfigurationMatrix:
    """Compute the configuration matrix for the given projects.

    Shared projects get no entries. The result depends only on the inputs.
    """
    matrix = ConfigurationMatrix(configurations=list(configurations), platforms=list(platforms))

    for project in projects:
        if project.is_shared:
            continue
        for solution_configuration in configurations:
            config_match = match_configuration(solution_configuration, project)
            for solution_platform in platforms:
                platform_match = match_platform(solution_platform, project)

                if not config_match.matched:
                    matrix.configuration_fallbacks += 1
                if not platform_match.matched:
                    matrix.unmatched_platforms += 1
                elif platform_match.fallback:
                    matrix.platform_fallbacks += 1
                elif config_match.matched:
                    matrix.exact_matches += 1

                matrix.entries.append(MatrixEntry(
                    project_id=project.id,
                    solution_configuration=solution_configuration,
                    solution_platform=solution_platform,
                    configuration=config_match.configuration,
                    active_platform=platform_match.active,
                    build_platform=platform_match.build,
                    build=config_match.matched and platform_match.matched and project.is_buildable,
                    deploy=project.is_deployable,
                ))

    return matrix


def run_reconcile_phase(config: GenerationConfig, solution: Solution) -> ConfigurationMatrix:
    """Derive the solution sets and attach the matrix to the solution."""
    ordered = sorted(solution.projects, key=lambda p: p.full_path)
    configurations = solution_configurations(ordered, solution.configurations or config.configurations)
    platforms = solution_platforms(ordered, solution.platforms or config.platforms)

    matrix = reconcile(ordered, configurations, platforms)
    solution.matrix = matrix

    logger.debug(
        f"Matrix: {len(matrix.entries)} entries, {matrix.exact_matches} exact, "
        f"{matrix.configuration_fallbacks} configuration fallback(s), "
        f"{matrix.platform_fallbacks} platform fallback(s), "
        f"{matrix.unmatched_platforms} unmatched platform(s)"
    )
    return matrix
