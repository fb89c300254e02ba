"""Data model shared by the graph builders and their consumers."""

from abapgraph.models.graph import (
    Cluster,
    DagEdge,
    DagNode,
    DagResult,
    ExternalDependency,
    MemberReference,
    PackageEntry,
    PackageGraph,
    PackageObject,
    ParsedDependency,
    ResolvedType,
    SubPackageNode,
)
from abapgraph.models.types import MemberType, ObjectType, ObjectTypeDef

__all__ = [
    "Cluster",
    "DagEdge",
    "DagNode",
    "DagResult",
    "ExternalDependency",
    "MemberReference",
    "MemberType",
    "ObjectType",
    "ObjectTypeDef",
    "PackageEntry",
    "PackageGraph",
    "PackageObject",
    "ParsedDependency",
    "ResolvedType",
    "SubPackageNode",
]
