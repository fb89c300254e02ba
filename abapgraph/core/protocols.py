"""Protocol interfaces for the graph engine's external collaborators.

Defines the contracts the builders consume (structural, no inheritance):
- SourceFetcher: object name -> source text
- DependencyExtractor: source text -> referenced objects
- TypeResolver: object name -> ADT type, or None
- PackageContentsFetcher: package name -> listing entries

Implementations raise on per-object failure (ideally one of the
CollaboratorError subclasses); the builders downgrade those to soft errors.
"""

from __future__ import annotations

from typing import Protocol

from abapgraph.models.graph import PackageEntry, ParsedDependency, ResolvedType
from abapgraph.models.types import ObjectType


class SourceFetcher(Protocol):
    """Fetches the main source of an object."""

    async def fetch_source(self, object_name: str) -> str:
        """Return the source text of the object.

        Raises:
            SourceFetchError: Object missing or unreachable
        """
        ...


class DependencyExtractor(Protocol):
    """Turns source text into referenced-object records.

    Pure function of its inputs.
    """

    def extract(
        self,
        source: str,
        object_name: str,
        object_type: ObjectType,
    ) -> list[ParsedDependency]:
        """Return the objects referenced by the source.

        Raises:
            DependencyExtractionError: Source does not parse
        """
        ...


class TypeResolver(Protocol):
    """Looks up the ADT type of an object by name."""

    async def resolve_object_type(self, object_name: str) -> ResolvedType | None:
        """Return the resolved type, or None if the search finds nothing.

        Raises:
            TypeResolutionError: Search service failed
        """
        ...


class PackageContentsFetcher(Protocol):
    """Lists the direct contents of a package."""

    async def get_package_contents(self, package_name: str) -> list[PackageEntry]:
        """Return objects and sub-package markers of the package.

        Raises:
            PackageFetchError: Package missing or unreachable
        """
        ...
