"""Disjoint-set union over object names.

Groups package objects into connected components based on internal
dependency edges. Path compression plus union by rank gives near-O(1)
amortized operations.
"""

from __future__ import annotations

from typing import Iterable

from abapgraph.core.errors import NotAMemberError


class UnionFind:
    """Union-find with path compression and union by rank.

    Every element starts in its own singleton set. Looking up an element
    that was never registered raises NotAMemberError.
    """

    def __init__(self, elements: Iterable[str]) -> None:
        self._parent: dict[str, str] = {}
        self._rank: dict[str, int] = {}
        for element in elements:
            self._parent[element] = element
            self._rank[element] = 0

    def __contains__(self, element: object) -> bool:
        return element in self._parent

    def __len__(self) -> int:
        return len(self._parent)

    def find(self, element: str) -> str:
        """Return the representative of the element's set.

        Args:
            element: A registered element.

        Returns:
            The root of the set containing the element.

        Raises:
            NotAMemberError: If the element was never registered.
        """
        if element not in self._parent:
            raise NotAMemberError(element)

        root = element
        while self._parent[root] != root:
            root = self._parent[root]

        # Compress: point every node on the path directly at the root
        node = element
        while self._parent[node] != root:
            next_node = self._parent[node]
            self._parent[node] = root
            node = next_node

        return root

    def union(self, x: str, y: str) -> None:
        """Merge the sets containing x and y. No-op if already joined."""
        root_x = self.find(x)
        root_y = self.find(y)
        if root_x == root_y:
            return

        rank_x = self._rank[root_x]
        rank_y = self._rank[root_y]
        if rank_x < rank_y:
            self._parent[root_x] = root_y
        elif rank_x > rank_y:
            self._parent[root_y] = root_x
        else:
            self._parent[root_y] = root_x
            self._rank[root_x] = rank_x + 1

    def connected(self, x: str, y: str) -> bool:
        return self.find(x) == self.find(y)

    def components(self) -> dict[str, list[str]]:
        """Return every set keyed by its representative.

        Returns:
            Mapping of representative -> members. Member order within a set
            is not significant.
        """
        result: dict[str, list[str]] = {}
        for element in self._parent:
            result.setdefault(self.find(element), []).append(element)
        return result
