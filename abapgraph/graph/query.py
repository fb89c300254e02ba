"""Read-only queries over a built dependency graph.

Answers where-used and depends-on questions for documentation tooling,
both direct and transitive, on top of a networkx DiGraph.
"""

from __future__ import annotations

from typing import Any

import networkx as nx

from abapgraph.graph.classifier import normalize_name
from abapgraph.models.graph import DagEdge, DagResult, PackageGraph


class DependencyGraphView:
    """Query view over a DagResult or PackageGraph.

    Edges point from the using object to the used object, so predecessors
    are where-used and successors are dependencies.
    """

    def __init__(self, nodes: list[str], edges: list[DagEdge]) -> None:
        """Initialize the view.

        Args:
            nodes: Node names.
            edges: Dependency edges. Edges with unknown endpoints are ignored.
        """
        self._graph: nx.DiGraph = nx.DiGraph()
        self._graph.add_nodes_from(nodes)
        self._edges: dict[tuple[str, str], DagEdge] = {}
        for edge in edges:
            if edge.source in self._graph and edge.target in self._graph:
                self._graph.add_edge(edge.source, edge.target)
                self._edges[edge.key] = edge

    @classmethod
    def from_dag(cls, result: DagResult) -> DependencyGraphView:
        return cls([node.name for node in result.nodes], result.edges)

    @classmethod
    def from_package_graph(cls, graph: PackageGraph) -> DependencyGraphView:
        return cls(graph.object_names, graph.internal_edges)

    def where_used(self, name: str, transitive: bool = False) -> list[str]:
        """Objects that use the given object.

        Args:
            name: Object name (any case).
            transitive: Include indirect users.

        Returns:
            Sorted object names; empty for unknown objects.
        """
        key = normalize_name(name)
        if key not in self._graph:
            return []
        if transitive:
            return sorted(nx.ancestors(self._graph, key))
        return sorted(self._graph.predecessors(key))

    def dependencies(self, name: str, transitive: bool = False) -> list[str]:
        """Objects the given object uses, directly or transitively."""
        key = normalize_name(name)
        if key not in self._graph:
            return []
        if transitive:
            return sorted(nx.descendants(self._graph, key))
        return sorted(self._graph.successors(key))

    def neighborhood(
        self,
        names: list[str],
        depth: int = 1,
    ) -> dict[str, dict[str, Any]]:
        """Return users and dependencies within N hops.

        Args:
            names: Objects to describe.
            depth: Hops for extended_neighbors, edge direction ignored.

        Returns:
            Mapping of object name -> {"uses", "used_by", "edges"} plus
            "extended_neighbors" when depth > 1.
        """
        result: dict[str, dict[str, Any]] = {}

        for name in names:
            key = normalize_name(name)
            if key not in self._graph:
                continue

            used_by = sorted(self._graph.predecessors(key))
            uses = sorted(self._graph.successors(key))
            result[key] = {
                "uses": uses,
                "used_by": used_by,
                "edges": [
                    edge.to_dict()
                    for edge in self._edges.values()
                    if key in (edge.source, edge.target)
                ],
            }

            if depth > 1:
                undirected = self._graph.to_undirected(as_view=True)
                reachable = nx.single_source_shortest_path_length(undirected, key, cutoff=depth)
                result[key]["extended_neighbors"] = sorted(
                    set(reachable) - {key} - set(uses) - set(used_by)
                )

        return result

    def get_edge(self, source: str, target: str) -> DagEdge | None:
        return self._edges.get((normalize_name(source), normalize_name(target)))

    def has_cycles(self) -> bool:
        return not nx.is_directed_acyclic_graph(self._graph)

    def cycles(self) -> list[list[str]]:
        """Return every simple dependency cycle."""
        return [list(cycle) for cycle in nx.simple_cycles(self._graph)]

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()
