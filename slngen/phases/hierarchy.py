"""Phase 2: Solution folder hierarchy synthesis."""

from __future__ import annotations

import logging
import os
import re
import uuid
from typing import Iterator

from slngen.config import Folder, GenerationConfig, Project, Solution
from slngen.dotnet.solution import folder_chain_key
from slngen.errors import AmbiguousHierarchyRoot
from slngen.graph.nesting_graph import NestingGraph
from slngen.identifiers import IdentifierSource, new_identifier
from slngen.paths import join_segments, normalize_path, path_key, split_segments

logger = logging.getLogger(__name__)

_FOLDER_SPLIT_RE = re.compile(r"[\\/]+")


def find_common_root(directories: list[str]) -> str:
    """Longest common ancestor of the directories, compared segment by segment.

    Segments are compared case-insensitively; the first directory's spelling
    is kept. Raises AmbiguousHierarchyRoot when given nothing.
    """
    if not directories:
        raise AmbiguousHierarchyRoot()

    split = [split_segments(normalize_path(d)) for d in directories]
    common = split[0]
    for segments in split[1:]:
        length = 0
        for a, b in zip(common, segments):
            if a.casefold() != b.casefold():
                break
            length += 1
        common = common[:length]

    return join_segments(common)


def _folder_name(path: str) -> str:
    return os.path.basename(path.rstrip(os.sep)) or path


class SolutionHierarchy:
    """A single-rooted tree of solution folders.

    The root is synthetic: it is never written as a folder, and folders
    directly under it are top level in the solution.
    """

    def __init__(self, root: Folder) -> None:
        self.root = root
        self._folders_by_key: dict[str, Folder] = {path_key(root.full_path): root} if root.full_path else {}

    @classmethod
    def from_project_directories(
        cls,
        projects: list[Project],
        new_id: IdentifierSource = new_identifier,
    ) -> SolutionHierarchy:
        """Mirror the directory layout of all non-primary projects."""
        placed = [p for p in projects if not p.is_primary]
        root_path = find_common_root([p.directory for p in placed])
        hierarchy = cls(Folder(full_path=root_path, name=_folder_name(root_path), id=new_id()))
        root_key = path_key(root_path)

        for project in placed:
            folder = hierarchy._get_or_create(project.directory, new_id)
            folder.projects.append(project)

            # Link each folder to its parent until the root is reached
            child = folder
            directory = project.directory
            while path_key(directory) != root_key:
                parent_dir = os.path.dirname(directory)
                if parent_dir == directory:
                    break
                parent = hierarchy._get_or_create(parent_dir, new_id)
                if child.parent is None:
                    child.parent = parent
                    parent.children.append(child)
                child = parent
                directory = parent_dir

        return hierarchy

    @classmethod
    def from_solution_folders(
        cls,
        projects: list[Project],
        new_id: IdentifierSource = new_identifier,
    ) -> SolutionHierarchy:
        """Build folders from the solution folder each project declares."""
        hierarchy = cls(Folder(full_path="", name="", id=new_id()))

        for project in projects:
            names = [n for n in _FOLDER_SPLIT_RE.split(project.solution_folder.strip()) if n.strip()]
            if not names:
                continue
            parent = hierarchy.root
            for i in range(len(names)):
                folder_path = "\\".join(names[: i + 1])
                key = folder_path.casefold()
                folder = hierarchy._folders_by_key.get(key)
                if folder is None:
                    folder = Folder(full_path=folder_path, name=names[i].strip(), id=new_id(), parent=parent)
                    parent.children.append(folder)
                    hierarchy._folders_by_key[key] = folder
                parent = folder
            parent.projects.append(project)

        return hierarchy

    def _get_or_create(self, directory: str, new_id: IdentifierSource) -> Folder:
        key = path_key(directory)
        folder = self._folders_by_key.get(key)
        if folder is None:
            folder = Folder(full_path=normalize_path(directory), name=_folder_name(directory), id=new_id())
            self._folders_by_key[key] = folder
        return folder

    def collapse(self, separator: str = " / ") -> None:
        """Merge every non-root folder that has exactly one child folder into itself.

        Applied bottom-up; projects of absorbed folders move to the survivor
        and grandchildren are adopted. Running it twice changes nothing.
        """
        for child in self.root.children:
            self._collapse(child, separator)

    def _collapse(self, folder: Folder, separator: str) -> None:
        for child in folder.children:
            self._collapse(child, separator)

        while len(folder.children) == 1:
            child = folder.children[0]
            folder.name = f"{folder.name}{separator}{child.name}"
            folder.projects.extend(child.projects)
            folder.children = child.children
            for grandchild in folder.children:
                grandchild.parent = folder

    @property
    def folders(self) -> list[Folder]:
        """All non-root folders, children before their parent."""
        return list(self._walk(self.root))

    def _walk(self, folder: Folder) -> Iterator[Folder]:
        for child in folder.children:
            yield from self._walk(child)
            yield child

    def projects(self) -> list[Project]:
        result = list(self.root.projects)
        for folder in self.folders:
            result.extend(folder.projects)
        return result

    def folder_chain(self, folder: Folder) -> list[str]:
        """Display names from the top-level folder down to this one."""
        names = []
        current: Folder | None = folder
        while current is not None and current is not self.root:
            names.append(current.name)
            current = current.parent
        return list(reversed(names))

    def apply_existing_ids(self, folder_ids: dict[str, uuid.UUID]) -> int:
        """Reuse ids of folders that had the same name chain before. Returns the count reused."""
        reused = 0
        for folder in self.folders:
            existing = folder_ids.get(folder_chain_key(self.folder_chain(folder)))
            if existing is not None:
                folder.id = existing
                reused += 1
        return reused

    def nesting_graph(self) -> NestingGraph:
        """Folder and project nesting below the root, in pre-order."""
        graph = NestingGraph()
        self._add_to_graph(graph, self.root)
        return graph

    def _add_to_graph(self, graph: NestingGraph, folder: Folder) -> None:
        for child in folder.children:
            graph.add_folder(child)
            if folder is not self.root:
                graph.add_nesting(folder.id, child.id)
        if folder is not self.root:
            for project in folder.projects:
                graph.add_project(project)
                graph.add_nesting(folder.id, project.id)
        for child in folder.children:
            self._add_to_graph(graph, child)


def run_hierarchy_phase(
    config: GenerationConfig,
    solution: Solution,
    new_id: IdentifierSource = new_identifier,
    existing_folder_ids: dict[str, uuid.UUID] | None = None,
) -> SolutionHierarchy | None:
    """Attach a folder hierarchy to the solution when one is wanted."""
    hierarchy = None

    if config.use_folders and any(not p.is_primary for p in solution.projects):
        try:
            hierarchy = SolutionHierarchy.from_project_directories(solution.projects, new_id)
        except AmbiguousHierarchyRoot:
            logger.debug("No projects to place in folders")
            return None
        if config.collapse_folders:
            hierarchy.collapse(config.collapse_separator)
    elif any(p.solution_folder for p in solution.projects):
        hierarchy = SolutionHierarchy.from_solution_folders(solution.projects, new_id)

    if hierarchy is None:
        return None

    if existing_folder_ids:
        reused = hierarchy.apply_existing_ids(existing_folder_ids)
        logger.debug(f"Reused {reused} folder id(s)")

    logger.debug(f"Hierarchy rooted at {hierarchy.root.full_path!r} with {len(hierarchy.folders)} folder(s)")
    solution.hierarchy = hierarchy
    return hierarchy
