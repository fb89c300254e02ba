"""Multi-step analysis pipelines built on the graph engine."""

from abapgraph.pipeline.package_analysis import (
    PackageAnalysis,
    SubPackageAnalysis,
    analyze_package,
    fetch_sources,
)

__all__ = [
    "PackageAnalysis",
    "SubPackageAnalysis",
    "analyze_package",
    "fetch_sources",
]
