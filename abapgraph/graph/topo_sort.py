"""Leaves-first topological ordering with cycle tolerance.

Edges use the natural dependency direction: ``source`` depends on
``target``, so ``target`` must be processed first. Kahn's algorithm runs on
the reversed graph. Nodes caught in a cycle never reach zero and are
appended at the end, so the function always returns every node.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable

from abapgraph.models.graph import DagEdge

logger = logging.getLogger(__name__)


def topological_sort(
    nodes: Iterable[str],
    edges: Iterable[DagEdge | tuple[str, str]],
) -> list[str]:
    """Order nodes so dependencies come before their dependents.

    Args:
        nodes: Node names to order. Duplicates are ignored.
        edges: DagEdges or (source, target) pairs. Edges with an endpoint
            outside ``nodes`` are ignored.

    Returns:
        Every node exactly once, leaves first. Nodes on a cycle follow in
        their input order after all orderable nodes.
    """
    node_list = list(dict.fromkeys(nodes))
    node_set = set(node_list)

    # Reverse adjacency: target -> dependents; pending = unprocessed targets
    dependents: dict[str, list[str]] = {name: [] for name in node_list}
    pending: dict[str, int] = {name: 0 for name in node_list}

    for edge in edges:
        source, target = (edge.source, edge.target) if isinstance(edge, DagEdge) else edge
        if source in node_set and target in node_set:
            dependents[target].append(source)
            pending[source] += 1

    queue: deque[str] = deque(name for name in node_list if pending[name] == 0)
    order: list[str] = []
    emitted: set[str] = set()

    while queue:
        current = queue.popleft()
        order.append(current)
        emitted.add(current)
        for dependent in dependents[current]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                queue.append(dependent)

    if len(order) < len(node_list):
        cyclic = [name for name in node_list if name not in emitted]
        logger.debug("topo_sort_cycle_fallback remaining=%d", len(cyclic))
        order.extend(cyclic)

    return order
