"""Type resolution for dependencies the extractor could not pin down.

Resolution order:
1. Interfaces identified by the extractor are trusted outright
2. The system's type search, when it answers
3. Naming heuristic: interface-looking names -> INTF, everything else -> CLAS
"""

from __future__ import annotations

import logging

from abapgraph.core.errors import TypeResolutionError, failure_message
from abapgraph.core.protocols import TypeResolver
from abapgraph.graph.classifier import looks_like_interface, normalize_name
from abapgraph.models.graph import ParsedDependency
from abapgraph.models.types import ObjectType

logger = logging.getLogger(__name__)


def heuristic_type(name: str) -> ObjectType:
    """Guess a type from the name alone."""
    return ObjectType.INTF if looks_like_interface(name) else ObjectType.CLAS


async def resolve_dependency_type(
    dependency: ParsedDependency,
    resolver: TypeResolver,
    errors: list[str],
) -> ObjectType:
    """Determine the concrete type of a dependency.

    Never raises for resolver failures: they are appended to ``errors``
    and the naming heuristic takes over.

    Args:
        dependency: Dependency as reported by the extractor.
        resolver: Type search service.
        errors: Soft-error accumulator.

    Returns:
        The resolved ObjectType.
    """
    declared = ObjectType.parse(dependency.object_type)
    if declared is ObjectType.INTF:
        return declared

    name = normalize_name(dependency.object_name)
    try:
        resolved = await resolver.resolve_object_type(name)
    except Exception as e:
        errors.append(failure_message(TypeResolutionError, name, e))
        logger.warning("type_resolution_failed object=%s error=%s", name, e)
        resolved = None

    if resolved is not None:
        return ObjectType.parse(resolved.object_type)

    guessed = heuristic_type(name)
    logger.debug("type_resolution_heuristic object=%s type=%s", name, guessed.value)
    return guessed
