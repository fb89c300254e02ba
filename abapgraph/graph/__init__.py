"""Dependency graph engine: discovery, ordering and clustering."""

from abapgraph.graph.classifier import (
    build_abapgit_filename,
    is_component_reference,
    is_custom_object,
    is_relevant_type,
    normalize_name,
)
from abapgraph.graph.dag_builder import DagBuilder, build_dependency_graph
from abapgraph.graph.package_graph import (
    build_package_graph,
    detect_clusters,
    fetch_package_objects,
)
from abapgraph.graph.package_tree import (
    PackageListing,
    discover_package_tree,
    flatten_package_tree,
    list_package_objects,
)
from abapgraph.graph.query import DependencyGraphView
from abapgraph.graph.topo_sort import topological_sort
from abapgraph.graph.type_resolver import resolve_dependency_type
from abapgraph.graph.union_find import UnionFind

__all__ = [
    "DagBuilder",
    "DependencyGraphView",
    "PackageListing",
    "UnionFind",
    "build_abapgit_filename",
    "build_dependency_graph",
    "build_package_graph",
    "detect_clusters",
    "discover_package_tree",
    "fetch_package_objects",
    "flatten_package_tree",
    "is_component_reference",
    "is_custom_object",
    "is_relevant_type",
    "list_package_objects",
    "normalize_name",
    "resolve_dependency_type",
    "topological_sort",
]
