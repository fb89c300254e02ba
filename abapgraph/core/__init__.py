"""Error hierarchy and collaborator protocols."""

from abapgraph.core.errors import (
    AbapGraphError,
    CollaboratorError,
    DependencyExtractionError,
    NotAMemberError,
    PackageFetchError,
    SourceFetchError,
    TypeResolutionError,
    failure_message,
)
from abapgraph.core.protocols import (
    DependencyExtractor,
    PackageContentsFetcher,
    SourceFetcher,
    TypeResolver,
)

__all__ = [
    "AbapGraphError",
    "CollaboratorError",
    "DependencyExtractionError",
    "DependencyExtractor",
    "NotAMemberError",
    "PackageContentsFetcher",
    "PackageFetchError",
    "SourceFetchError",
    "SourceFetcher",
    "TypeResolutionError",
    "TypeResolver",
    "failure_message",
]
