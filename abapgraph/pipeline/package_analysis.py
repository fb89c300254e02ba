"""Whole-package mode: tree discovery -> sources -> graph -> clusters.

Each package of the discovered tree is analyzed on its own object set, so
cross-sub-package references show up as external dependencies. All
fetches run one after another.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from abapgraph.config import DEFAULT_MAX_SUBPACKAGE_DEPTH, PACKAGE_FETCH_TIMEOUT_SECONDS
from abapgraph.core.errors import SourceFetchError, failure_message
from abapgraph.core.protocols import (
    DependencyExtractor,
    PackageContentsFetcher,
    SourceFetcher,
)
from abapgraph.graph.package_graph import build_package_graph, detect_clusters
from abapgraph.graph.package_tree import discover_package_tree, flatten_package_tree
from abapgraph.models.graph import (
    Cluster,
    PackageGraph,
    PackageObject,
    SubPackageNode,
)

logger = logging.getLogger(__name__)


@dataclass
class SubPackageAnalysis:
    """Graph and clusters of one package in the tree."""

    name: str
    depth: int
    graph: PackageGraph
    clusters: list[Cluster] = field(default_factory=list)
    sources: dict[str, str] = field(default_factory=dict)


@dataclass
class PackageAnalysis:
    """Outcome of a whole-package analysis. Always returned, even when partial."""

    package_name: str
    tree: SubPackageNode
    sub_packages: list[SubPackageAnalysis] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def object_count(self) -> int:
        return sum(len(sp.graph.objects) for sp in self.sub_packages)

    @property
    def cluster_count(self) -> int:
        return sum(len(sp.clusters) for sp in self.sub_packages)


async def fetch_sources(
    objects: list[PackageObject],
    fetcher: SourceFetcher,
    errors: list[str],
) -> dict[str, str]:
    """Fetch the source of every object, one at a time.

    Failed objects are left out of the result and recorded in ``errors``.
    """
    sources: dict[str, str] = {}
    for obj in objects:
        try:
            sources[obj.name] = await fetcher.fetch_source(obj.name)
        except Exception as e:
            errors.append(failure_message(SourceFetchError, obj.name, e))
            logger.warning("source_fetch_failed object=%s error=%s", obj.name, e)
    return sources


async def analyze_package(
    package_name: str,
    *,
    contents: PackageContentsFetcher,
    fetcher: SourceFetcher,
    extractor: DependencyExtractor,
    max_depth: int = DEFAULT_MAX_SUBPACKAGE_DEPTH,
    timeout: float = PACKAGE_FETCH_TIMEOUT_SECONDS,
) -> PackageAnalysis:
    """Analyze a package and its sub-packages.

    Args:
        package_name: Root package.
        contents: Package contents service.
        fetcher: Source fetching service.
        extractor: Dependency extractor.
        max_depth: Sub-package recursion depth.
        timeout: Seconds allowed for each contents fetch.

    Returns:
        PackageAnalysis with one entry per package, breadth-first.
    """
    errors: list[str] = []
    tree = await discover_package_tree(
        contents, package_name, max_depth=max_depth, timeout=timeout, errors=errors
    )
    analysis = PackageAnalysis(package_name=tree.name, tree=tree, errors=errors)

    for node in flatten_package_tree(tree):
        sources = await fetch_sources(node.objects, fetcher, errors)
        graph = build_package_graph(node.objects, sources, extractor, errors)
        analysis.sub_packages.append(
            SubPackageAnalysis(
                name=node.name,
                depth=node.depth,
                graph=graph,
                clusters=detect_clusters(graph),
                sources=sources,
            )
        )

    logger.info(
        "package_analysis_complete package=%s packages=%d objects=%d clusters=%d errors=%d",
        analysis.package_name,
        len(analysis.sub_packages),
        analysis.object_count,
        analysis.cluster_count,
        len(errors),
    )
    return analysis
