"""Error hierarchy for the dependency graph engine.

Two families live here:
- Contract violations (NotAMemberError) signal a caller bug and always
  propagate.
- Collaborator errors (fetch, extraction, resolution) are what external
  services raise. The builders catch them at the point of use and record
  them as soft errors. Check .retryable before retrying.
"""

from __future__ import annotations


class AbapGraphError(Exception):
    """Base error for the graph engine.

    All abapgraph-specific errors inherit from this.
    """

    pass


# =============================================================================
# Contract Violations
# =============================================================================


class NotAMemberError(AbapGraphError, KeyError):
    """Lookup of an element never registered in a UnionFind.

    Attributes:
        element: The unknown element

    Retry: Never retryable - fix the caller.
    """

    def __init__(self, element: str) -> None:
        self.element = element
        super().__init__(f"Element {element} is not a member of this UnionFind")

    def __str__(self) -> str:
        return self.args[0]


# =============================================================================
# Collaborator Errors
# =============================================================================


class CollaboratorError(AbapGraphError):
    """An external service failed for one object.

    Attributes:
        object_name: The object (or package) the call was about
        reason: Human-readable error description
        retryable: Whether the call can be retried
    """

    action = "process"

    def __init__(self, object_name: str, reason: str, retryable: bool = False) -> None:
        self.object_name = object_name
        self.reason = reason
        self.retryable = retryable
        super().__init__(f"Failed to {self.action} {object_name}: {reason}")


class SourceFetchError(CollaboratorError):
    """Source text could not be fetched.

    Retry: Retryable for transient connection failures.
    """

    action = "fetch source for"


class DependencyExtractionError(CollaboratorError):
    """Source text could not be parsed into dependencies.

    Retry: Never retryable - the source does not parse.
    """

    action = "parse dependencies for"


class TypeResolutionError(CollaboratorError):
    """The type-resolution search failed.

    Retry: Retryable for transient connection failures.
    """

    action = "resolve type for"


class PackageFetchError(CollaboratorError):
    """Package contents could not be listed.

    Retry: Retryable for transient connection failures.
    """

    action = "list contents of package"


def failure_message(
    error_type: type[CollaboratorError],
    object_name: str,
    error: Exception,
) -> str:
    """Soft-error text for a failed collaborator call.

    CollaboratorErrors already carry the full message. Any other exception
    is described as if it had been raised as ``error_type``.
    """
    if isinstance(error, CollaboratorError):
        return str(error)
    return str(error_type(object_name, str(error)))
