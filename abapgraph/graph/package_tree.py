"""Recursive sub-package discovery.

Walks a package's sub-packages up to a depth limit. Every contents fetch
runs under its own timeout, and a failing sub-package only loses its own
branch: siblings still complete.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field

from abapgraph.config import DEFAULT_MAX_SUBPACKAGE_DEPTH, PACKAGE_FETCH_TIMEOUT_SECONDS
from abapgraph.core.errors import PackageFetchError, failure_message
from abapgraph.core.protocols import PackageContentsFetcher
from abapgraph.graph.classifier import normalize_name
from abapgraph.graph.package_graph import select_package_objects
from abapgraph.models.graph import PackageEntry, PackageObject, SubPackageNode
from abapgraph.models.types import ObjectType

logger = logging.getLogger(__name__)


@dataclass
class PackageListing:
    """Flat listing of a package tree's objects."""

    package_name: str
    objects: list[tuple[str, PackageObject]] = field(default_factory=list)  # (sub-package, object)
    sub_packages: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


async def discover_package_tree(
    contents: PackageContentsFetcher,
    package_name: str,
    *,
    max_depth: int = DEFAULT_MAX_SUBPACKAGE_DEPTH,
    timeout: float = PACKAGE_FETCH_TIMEOUT_SECONDS,
    errors: list[str] | None = None,
) -> SubPackageNode:
    """Enumerate a package and its sub-packages.

    Args:
        contents: Package contents service.
        package_name: Root package.
        max_depth: Deepest level to descend to (root is depth 0).
        timeout: Seconds allowed for each contents fetch.
        errors: Soft-error accumulator.

    Returns:
        The root SubPackageNode. If the root itself cannot be listed it is
        returned empty and the failure is recorded in ``errors``.

    Raises:
        ValueError: If max_depth is negative.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must not be negative, got {max_depth}")
    if errors is None:
        errors = []

    root = normalize_name(package_name)
    entries = await _fetch_contents(contents, root, timeout, errors)
    if entries is None:
        return SubPackageNode(name=root, depth=0)

    tree = await _build_node(
        contents, root, "", 0, entries, max_depth, timeout, errors, seen={root}
    )
    logger.info(
        "package_tree_discovered package=%s packages=%d errors=%d",
        root,
        len(flatten_package_tree(tree)),
        len(errors),
    )
    return tree


async def _build_node(
    contents: PackageContentsFetcher,
    name: str,
    description: str,
    depth: int,
    entries: list[PackageEntry],
    max_depth: int,
    timeout: float,
    errors: list[str],
    seen: set[str],
) -> SubPackageNode:
    """Build one tree node; packages already in ``seen`` are not walked again."""
    markers: list[PackageEntry] = []
    regular: list[PackageEntry] = []
    for entry in entries:
        if ObjectType.parse(entry.object_type) is ObjectType.DEVC:
            marker_name = normalize_name(entry.name)
            if marker_name in seen:
                logger.debug("subpackage_already_seen package=%s parent=%s", marker_name, name)
            else:
                markers.append(entry)
        else:
            regular.append(entry)

    node = SubPackageNode(
        name=name,
        description=description,
        depth=depth,
        objects=select_package_objects(regular),
    )
    if not markers:
        return node

    if depth >= max_depth:
        skipped = ", ".join(normalize_name(marker.name) for marker in markers)
        errors.append(
            f"Sub-package depth limit of {max_depth} reached in {name}; skipped: {skipped}"
        )
        logger.info("subpackage_depth_limit package=%s skipped=%d", name, len(markers))
        return node

    for marker in markers:
        child_name = normalize_name(marker.name)
        if child_name in seen:
            continue
        seen.add(child_name)
        child_entries = await _fetch_contents(contents, child_name, timeout, errors)
        if child_entries is None:
            continue
        node.children.append(
            await _build_node(
                contents,
                child_name,
                marker.description,
                depth + 1,
                child_entries,
                max_depth,
                timeout,
                errors,
                seen,
            )
        )
    return node


async def _fetch_contents(
    contents: PackageContentsFetcher,
    package_name: str,
    timeout: float,
    errors: list[str],
) -> list[PackageEntry] | None:
    """Fetch one package listing; None (plus a soft error) on failure."""
    try:
        return await asyncio.wait_for(contents.get_package_contents(package_name), timeout)
    except asyncio.TimeoutError:
        errors.append(f"Timed out after {timeout:g}s listing package {package_name}")
        logger.warning("package_fetch_timeout package=%s timeout=%s", package_name, timeout)
    except Exception as e:
        errors.append(failure_message(PackageFetchError, package_name, e))
        logger.warning("package_fetch_failed package=%s error=%s", package_name, e)
    return None


def flatten_package_tree(tree: SubPackageNode) -> list[SubPackageNode]:
    """Return every node of the tree in breadth-first order."""
    result: list[SubPackageNode] = []
    queue: deque[SubPackageNode] = deque([tree])
    while queue:
        node = queue.popleft()
        result.append(node)
        queue.extend(node.children)
    return result


async def list_package_objects(
    contents: PackageContentsFetcher,
    package_name: str,
    *,
    max_depth: int = DEFAULT_MAX_SUBPACKAGE_DEPTH,
    timeout: float = PACKAGE_FETCH_TIMEOUT_SECONDS,
) -> PackageListing:
    """Discover a package tree and list its objects with their sub-package."""
    errors: list[str] = []
    tree = await discover_package_tree(
        contents, package_name, max_depth=max_depth, timeout=timeout, errors=errors
    )
    nodes = flatten_package_tree(tree)
    return PackageListing(
        package_name=tree.name,
        objects=[(node.name, obj) for node in nodes for obj in node.objects],
        sub_packages=[node.name for node in nodes[1:]],
        errors=errors,
    )
