"""Solution nesting relation backed by networkx.DiGraph."""

from __future__ import annotations

import uuid

import networkx as nx

from slngen.config import Folder, Project


class NestingGraph:
    """Folders and projects as nodes, parent -> child NESTS edges.

    Nodes are keyed by their solution identifier.
    """

    def __init__(self) -> None:
        self.graph = nx.DiGraph()

    # --- Node addition ---

    def add_folder(self, folder: Folder) -> None:
        self.graph.add_node(
            folder.id,
            node_type="folder",
            name=folder.name,
            path=folder.full_path,
        )

    def add_project(self, project: Project) -> None:
        self.graph.add_node(
            project.id,
            node_type="project",
            name=project.name,
            path=project.full_path,
        )

    def add_nesting(self, parent: uuid.UUID, child: uuid.UUID) -> None:
        self.graph.add_edge(parent, child, edge_type="NESTS")

    # --- Queries ---

    def get_nested_pairs(self) -> list[tuple[uuid.UUID, uuid.UUID]]:
        """(child, parent) pairs, grouped by parent in node insertion order."""
        return [
            (child, parent)
            for parent, child, data in self.graph.edges(data=True)
            if data.get("edge_type") == "NESTS"
        ]

    def roots(self) -> list[uuid.UUID]:
        return [node for node, degree in self.graph.in_degree() if degree == 0]

    def is_single_rooted(self) -> bool:
        if self.graph.number_of_nodes() == 0:
            return False
        return nx.is_arborescence(self.graph)

    def folder_count(self) -> int:
        return sum(1 for _, d in self.graph.nodes(data=True) if d.get("node_type") == "folder")

    def project_count(self) -> int:
        return sum(1 for _, d in self.graph.nodes(data=True) if d.get("node_type") == "project")
