"""Single-root dependency graph discovery.

Builds a bounded dependency graph for one ABAP object:

1. Fetch the object's source and extract its dependencies
2. Enqueue custom (Z*/Y*) dependencies for the same treatment
3. Acknowledge standard dependencies as leaf nodes without fetching them
4. Stop globally once the node budget is reached

Traversal is breadth-first and strictly sequential, so the budget always
keeps the objects closest to the root. Edges to objects that were not yet
nodes when discovered are deferred and committed only if their target
made it into the final graph.
"""

from __future__ import annotations

import logging
from collections import deque

from abapgraph.config import DEFAULT_MAX_NODES
from abapgraph.core.errors import (
    DependencyExtractionError,
    SourceFetchError,
    failure_message,
)
from abapgraph.core.protocols import DependencyExtractor, SourceFetcher, TypeResolver
from abapgraph.graph.classifier import (
    is_component_reference,
    is_custom_object,
    is_relevant_type,
    normalize_name,
)
from abapgraph.graph.topo_sort import topological_sort
from abapgraph.graph.type_resolver import resolve_dependency_type
from abapgraph.models.graph import (
    DagEdge,
    DagNode,
    DagResult,
    MemberReference,
    ParsedDependency,
)
from abapgraph.models.types import ObjectType

logger = logging.getLogger(__name__)


class DagBuilder:
    """Builds dependency graphs against one set of collaborators.

    Each call to build() owns its own traversal state, so a builder can be
    reused for several roots.
    """

    def __init__(
        self,
        fetcher: SourceFetcher,
        extractor: DependencyExtractor,
        resolver: TypeResolver,
        max_nodes: int = DEFAULT_MAX_NODES,
    ) -> None:
        """Initialize the builder.

        Args:
            fetcher: Source fetching service.
            extractor: Dependency extractor.
            resolver: Type search service.
            max_nodes: Node budget per graph (at least 1).

        Raises:
            ValueError: If max_nodes is below 1.
        """
        if max_nodes < 1:
            raise ValueError(f"max_nodes must be at least 1, got {max_nodes}")
        self._fetcher = fetcher
        self._extractor = extractor
        self._resolver = resolver
        self._max_nodes = max_nodes

    async def build(self, root_name: str, root_type: ObjectType | str) -> DagResult:
        """Discover the dependency graph of a root object.

        Per-object failures never raise; they end up in ``DagResult.errors``.

        Args:
            root_name: Name of the root object (any case).
            root_type: Declared type of the root object.

        Returns:
            The (possibly partial) graph.
        """
        traversal = _Traversal(
            fetcher=self._fetcher,
            extractor=self._extractor,
            resolver=self._resolver,
            max_nodes=self._max_nodes,
        )
        return await traversal.run(normalize_name(root_name), ObjectType.parse(root_type))


async def build_dependency_graph(
    root_name: str,
    root_type: ObjectType | str,
    *,
    fetcher: SourceFetcher,
    extractor: DependencyExtractor,
    resolver: TypeResolver,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> DagResult:
    """Discover the dependency graph of a root object.

    Convenience wrapper around DagBuilder for one-off builds.
    """
    builder = DagBuilder(fetcher, extractor, resolver, max_nodes=max_nodes)
    return await builder.build(root_name, root_type)


class _Traversal:
    """State of one graph build. Never shared between builds."""

    def __init__(
        self,
        fetcher: SourceFetcher,
        extractor: DependencyExtractor,
        resolver: TypeResolver,
        max_nodes: int,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._resolver = resolver
        self._max_nodes = max_nodes

        self._queue: deque[tuple[str, ObjectType]] = deque()
        self._queued: set[str] = set()  # Every name ever enqueued
        self._visited: set[str] = set()
        self._nodes: dict[str, DagNode] = {}
        self._edges: dict[tuple[str, str], DagEdge] = {}
        self._deferred: dict[tuple[str, str], DagEdge] = {}
        self._resolved_types: dict[str, ObjectType] = {}
        self._unexplored: set[str] = set()  # Cut off by the node budget
        self._errors: list[str] = []

    async def run(self, root: str, root_type: ObjectType) -> DagResult:
        logger.info(
            "dag_build_start root=%s type=%s max_nodes=%d",
            root,
            root_type.value,
            self._max_nodes,
        )
        self._enqueue(root, root_type)

        while self._queue:
            name, object_type = self._queue.popleft()
            if name in self._visited:
                continue

            if self._budget_reached():
                self._unexplored.add(name)
                self._unexplored.update(
                    queued for queued, _ in self._queue if queued not in self._visited
                )
                self._queue.clear()
                break

            self._visited.add(name)
            await self._expand(name, object_type)

        self._report_cutoff()
        edges = self._commit_edges()
        self._reconcile_used_by(edges)
        order = topological_sort(self._nodes, edges)

        logger.info(
            "dag_build_complete root=%s nodes=%d edges=%d errors=%d",
            root,
            len(self._nodes),
            len(edges),
            len(self._errors),
        )
        return DagResult(
            root=root,
            nodes=list(self._nodes.values()),
            edges=edges,
            topological_order=order,
            errors=self._errors,
        )

    def _budget_reached(self) -> bool:
        return len(self._nodes) >= self._max_nodes

    def _enqueue(self, name: str, object_type: ObjectType) -> None:
        self._queue.append((name, object_type))
        self._queued.add(name)

    async def _expand(self, name: str, object_type: ObjectType) -> None:
        """Fetch one object, add its node and classify its dependencies."""
        try:
            source = await self._fetcher.fetch_source(name)
        except Exception as e:
            self._errors.append(failure_message(SourceFetchError, name, e))
            logger.warning("source_fetch_failed object=%s error=%s", name, e)
            return

        self._nodes[name] = DagNode(
            name=name,
            type=object_type,
            is_custom=is_custom_object(name),
            source_available=True,
            source=source,
        )

        try:
            dependencies = self._extractor.extract(source, name, object_type)
        except Exception as e:
            self._errors.append(failure_message(DependencyExtractionError, name, e))
            logger.warning("dependency_extraction_failed object=%s error=%s", name, e)
            return

        for dependency in dependencies:
            await self._classify(name, dependency)

    async def _classify(self, current: str, dependency: ParsedDependency) -> None:
        target = normalize_name(dependency.object_name)
        if not target or target == current or is_component_reference(target):
            return

        if target in self._nodes:
            self._add_edge(current, target, dependency.members)
            return

        if target in self._queued:
            # Pending fetch, or fetched and failed: decided at commit time
            self._defer_edge(current, target, dependency.members)
            return

        if is_custom_object(target):
            object_type = await self._resolve_type(target, dependency)
            if not is_relevant_type(object_type):
                logger.debug("dependency_discarded object=%s type=%s", target, object_type.value)
                return
            self._enqueue(target, object_type)
            self._defer_edge(current, target, dependency.members)
            return

        object_type = await self._standard_type(target, dependency)
        if not is_relevant_type(object_type):
            logger.debug("dependency_discarded object=%s type=%s", target, object_type.value)
            return
        if self._budget_reached():
            self._unexplored.add(target)
            return

        self._nodes[target] = DagNode(
            name=target,
            type=object_type,
            is_custom=False,
            source_available=False,
        )
        self._add_edge(current, target, dependency.members)

    async def _resolve_type(self, name: str, dependency: ParsedDependency) -> ObjectType:
        if name not in self._resolved_types:
            self._resolved_types[name] = await resolve_dependency_type(
                dependency, self._resolver, self._errors
            )
        return self._resolved_types[name]

    async def _standard_type(self, name: str, dependency: ParsedDependency) -> ObjectType:
        """Type of a standard dependency: the extractor's, confirmed if unknown."""
        declared = ObjectType.parse(dependency.object_type)
        if declared is not ObjectType.UNKNOWN:
            return declared
        return await self._resolve_type(name, dependency)

    def _add_edge(self, source: str, target: str, references: list[MemberReference]) -> None:
        _merge_edge(self._edges, source, target, references)
        target_node = self._nodes[target]
        if source not in target_node.used_by:
            target_node.used_by.append(source)

    def _defer_edge(self, source: str, target: str, references: list[MemberReference]) -> None:
        _merge_edge(self._deferred, source, target, references)

    def _report_cutoff(self) -> None:
        remaining = self._unexplored - self._nodes.keys()
        if not remaining:
            return
        self._errors.append(
            f"Node limit of {self._max_nodes} reached: "
            f"{len(remaining)} objects left unexplored"
        )
        logger.info("dag_node_limit_reached max_nodes=%d unexplored=%d", self._max_nodes, len(remaining))

    def _commit_edges(self) -> list[DagEdge]:
        """Resolve deferred edges against the final node set."""
        dropped = 0
        for edge in self._deferred.values():
            if edge.target in self._nodes:
                _merge_edge(self._edges, edge.source, edge.target, edge.references)
            else:
                dropped += 1
        if dropped:
            logger.debug("deferred_edges_dropped count=%d", dropped)

        return [
            edge
            for edge in self._edges.values()
            if edge.source in self._nodes and edge.target in self._nodes
        ]

    def _reconcile_used_by(self, edges: list[DagEdge]) -> None:
        """Rebuild every used_by list from the committed edges."""
        for node in self._nodes.values():
            node.used_by = []
        for edge in edges:
            used_by = self._nodes[edge.target].used_by
            if edge.source not in used_by:
                used_by.append(edge.source)


def _merge_edge(
    edges: dict[tuple[str, str], DagEdge],
    source: str,
    target: str,
    references: list[MemberReference],
) -> None:
    edge = edges.get((source, target))
    if edge is None:
        edge = DagEdge(source=source, target=target)
        edges[(source, target)] = edge
    edge.add_references(references)
