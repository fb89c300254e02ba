"""Graph data model for dependency discovery.

These types flow from the builders to every downstream consumer:
ParsedDependency -> DagEdge / ExternalDependency -> DagResult / PackageGraph
-> Cluster. Node identity is always the upper-cased object name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from abapgraph.models.types import MemberType, ObjectType


@dataclass(frozen=True)
class MemberReference:
    """A specific symbol used on a dependency target."""

    member_name: str
    member_type: MemberType = MemberType.UNKNOWN
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "memberName": self.member_name,
            "memberType": self.member_type.value,
        }
        if self.line is not None:
            data["line"] = self.line
        return data


def merge_references(
    existing: list[MemberReference],
    incoming: list[MemberReference],
) -> None:
    """Append incoming references, suppressing duplicate (member, type) pairs.

    Args:
        existing: Reference list to extend in place.
        incoming: References to merge into it.
    """
    seen = {(ref.member_name.upper(), ref.member_type) for ref in existing}
    for ref in incoming:
        key = (ref.member_name.upper(), ref.member_type)
        if key not in seen:
            seen.add(key)
            existing.append(ref)


@dataclass
class ParsedDependency:
    """One referenced object as reported by the dependency extractor.

    Not retained after being folded into edges.
    """

    object_name: str
    object_type: ObjectType = ObjectType.UNKNOWN
    members: list[MemberReference] = field(default_factory=list)


@dataclass(frozen=True)
class ResolvedType:
    """Answer of the type-resolution search service."""

    object_type: ObjectType
    uri: str = ""


@dataclass
class DagNode:
    """An object in a single-root dependency graph."""

    name: str
    type: ObjectType
    is_custom: bool
    source_available: bool
    used_by: list[str] = field(default_factory=list)
    source: str | None = None  # Only set when the source was fetched

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "isCustom": self.is_custom,
            "sourceAvailable": self.source_available,
            "usedBy": list(self.used_by),
        }


@dataclass
class DagEdge:
    """A dependency: ``source`` uses ``target``.

    Multiple references between the same pair accumulate on one edge.
    """

    source: str
    target: str
    references: list[MemberReference] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.source, self.target)

    def add_references(self, references: list[MemberReference]) -> None:
        merge_references(self.references, references)

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "references": [ref.to_dict() for ref in self.references],
        }


@dataclass
class DagResult:
    """Outcome of a single-root graph build.

    Always returned, even when partial. An empty node list means the root
    itself could not be fetched; ``errors`` explains why.
    """

    root: str
    nodes: list[DagNode] = field(default_factory=list)
    edges: list[DagEdge] = field(default_factory=list)
    topological_order: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def node_map(self) -> dict[str, DagNode]:
        """Return nodes keyed by name."""
        return {node.name: node for node in self.nodes}

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready representation."""
        return {
            "root": self.root,
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "topologicalOrder": list(self.topological_order),
            "errors": list(self.errors),
        }


@dataclass(frozen=True)
class PackageEntry:
    """Raw entry of a package-contents listing."""

    name: str
    object_type: str  # Raw ADT type, e.g. "CLAS/OC" or "DEVC/K"
    description: str = ""
    uri: str = ""


@dataclass
class PackageObject:
    """A relevant custom object enumerated from a package."""

    name: str
    type: ObjectType
    description: str = ""
    uri: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "description": self.description,
            "uri": self.uri,
        }


@dataclass
class ExternalDependency:
    """A dependency leaving the package's fixed object set."""

    source: str
    target: str
    target_type: ObjectType
    references: list[MemberReference] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "toType": self.target_type.value,
            "references": [ref.to_dict() for ref in self.references],
        }


@dataclass
class PackageGraph:
    """Internal/external dependency structure of a fixed object set."""

    objects: list[PackageObject] = field(default_factory=list)
    internal_edges: list[DagEdge] = field(default_factory=list)
    external_dependencies: list[ExternalDependency] = field(default_factory=list)

    @property
    def object_names(self) -> list[str]:
        return [obj.name for obj in self.objects]


@dataclass
class Cluster:
    """A weakly-connected group of package objects documented together.

    ``name`` is assigned later by a namer; numbered clusters start empty.
    """

    id: int
    name: str
    objects: list[PackageObject] = field(default_factory=list)
    internal_edges: list[DagEdge] = field(default_factory=list)
    topological_order: list[str] = field(default_factory=list)

    @property
    def object_names(self) -> list[str]:
        return [obj.name for obj in self.objects]


@dataclass
class SubPackageNode:
    """A package in a discovered package tree."""

    name: str
    description: str = ""
    depth: int = 0
    objects: list[PackageObject] = field(default_factory=list)
    children: list[SubPackageNode] = field(default_factory=list)
