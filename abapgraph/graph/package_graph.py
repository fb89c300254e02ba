"""Package-level dependency graph and functional clustering.

Unlike the single-root builder, the object set here is fixed up front:
nothing is discovered or enqueued. Every dependency is either internal
(both endpoints in the package) or external (leaves the package).
Internal edges are then grouped into weakly-connected clusters, the unit
the summarizer reasons about jointly.
"""

from __future__ import annotations

import logging
from typing import Mapping

from abapgraph.config import STANDALONE_CLUSTER_NAME
from abapgraph.core.errors import DependencyExtractionError, failure_message
from abapgraph.core.protocols import DependencyExtractor, PackageContentsFetcher
from abapgraph.graph.classifier import (
    is_component_reference,
    is_custom_object,
    is_relevant_type,
    normalize_name,
)
from abapgraph.graph.topo_sort import topological_sort
from abapgraph.graph.union_find import UnionFind
from abapgraph.models.graph import (
    Cluster,
    DagEdge,
    ExternalDependency,
    PackageEntry,
    PackageGraph,
    PackageObject,
    merge_references,
)
from abapgraph.models.types import ObjectType

logger = logging.getLogger(__name__)


def select_package_objects(entries: list[PackageEntry]) -> list[PackageObject]:
    """Keep relevant custom objects from a package listing.

    Args:
        entries: Raw package-contents entries.

    Returns:
        PackageObjects with upper-cased names and parsed types.
    """
    objects: list[PackageObject] = []
    for entry in entries:
        object_type = ObjectType.parse(entry.object_type)
        if is_relevant_type(object_type) and is_custom_object(entry.name):
            objects.append(
                PackageObject(
                    name=normalize_name(entry.name),
                    type=object_type,
                    description=entry.description,
                    uri=entry.uri,
                )
            )
    return objects


async def fetch_package_objects(
    contents: PackageContentsFetcher,
    package_name: str,
) -> list[PackageObject]:
    """List a package and keep its relevant custom objects.

    Raises:
        Whatever the contents fetcher raises; callers decide whether that
        is fatal.
    """
    entries = await contents.get_package_contents(normalize_name(package_name))
    return select_package_objects(entries)


def build_package_graph(
    objects: list[PackageObject],
    sources: Mapping[str, str],
    extractor: DependencyExtractor,
    errors: list[str] | None = None,
) -> PackageGraph:
    """Classify every dependency of a fixed object set.

    Args:
        objects: The package's objects (the fixed set).
        sources: Pre-fetched source text keyed by object name. Objects
            without source are skipped.
        extractor: Dependency extractor.
        errors: Soft-error accumulator for extraction failures.

    Returns:
        PackageGraph with internal edges and external dependencies, each
        unique per (from, to).
    """
    if errors is None:
        errors = []

    object_names = {obj.name for obj in objects}
    internal: dict[tuple[str, str], DagEdge] = {}
    external: dict[tuple[str, str], ExternalDependency] = {}

    for obj in objects:
        source = sources.get(obj.name)
        if not source:
            logger.debug("package_object_without_source object=%s", obj.name)
            continue

        try:
            dependencies = extractor.extract(source, obj.name, obj.type)
        except Exception as e:
            errors.append(failure_message(DependencyExtractionError, obj.name, e))
            logger.warning("dependency_extraction_failed object=%s error=%s", obj.name, e)
            continue

        for dependency in dependencies:
            target = normalize_name(dependency.object_name)
            if not target or target == obj.name or is_component_reference(target):
                continue

            key = (obj.name, target)
            if target in object_names:
                edge = internal.get(key)
                if edge is None:
                    edge = internal[key] = DagEdge(source=obj.name, target=target)
                edge.add_references(dependency.members)
            else:
                ext = external.get(key)
                if ext is None:
                    ext = external[key] = ExternalDependency(
                        source=obj.name,
                        target=target,
                        target_type=ObjectType.parse(dependency.object_type),
                    )
                merge_references(ext.references, dependency.members)

    logger.info(
        "package_graph_built objects=%d internal_edges=%d external_dependencies=%d",
        len(objects),
        len(internal),
        len(external),
    )
    return PackageGraph(
        objects=list(objects),
        internal_edges=list(internal.values()),
        external_dependencies=list(external.values()),
    )


def detect_clusters(graph: PackageGraph) -> list[Cluster]:
    """Partition the package into weakly-connected clusters.

    Objects with no internal edge at all are bundled into one trailing
    standalone cluster instead of one cluster each.

    Args:
        graph: The package graph.

    Returns:
        Numbered clusters (ids from 0, in order of their first object),
        followed by the standalone cluster if any object qualifies.
    """
    object_map = {obj.name: obj for obj in graph.objects}
    union_find = UnionFind(object_map)
    for edge in graph.internal_edges:
        union_find.union(edge.source, edge.target)

    touched: set[str] = set()
    for edge in graph.internal_edges:
        touched.add(edge.source)
        touched.add(edge.target)

    clusters: list[Cluster] = []
    singletons: list[PackageObject] = []

    for members in union_find.components().values():
        if len(members) == 1 and members[0] not in touched:
            singletons.append(object_map[members[0]])
            continue

        member_set = set(members)
        cluster_edges = [
            edge
            for edge in graph.internal_edges
            if edge.source in member_set and edge.target in member_set
        ]
        clusters.append(
            Cluster(
                id=len(clusters),
                name="",
                objects=[object_map[name] for name in members],
                internal_edges=cluster_edges,
                topological_order=topological_sort(members, cluster_edges),
            )
        )

    if singletons:
        clusters.append(
            Cluster(
                id=len(clusters),
                name=STANDALONE_CLUSTER_NAME,
                objects=singletons,
                internal_edges=[],
                topological_order=[obj.name for obj in singletons],
            )
        )

    logger.info(
        "clusters_detected clusters=%d standalone=%d",
        len(clusters) - (1 if singletons else 0),
        len(singletons),
    )
    return clusters
