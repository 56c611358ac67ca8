"""Chamber connectivity tracking backed by a disjoint-set union structure."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Set


class DisjointSetUnion:
    """Disjoint set union with path compression and canonical minimum roots."""

    def __init__(self) -> None:
        self._parent: Dict[int, int] = {}

    def add(self, item: int) -> None:
        if item not in self._parent:
            self._parent[item] = item

    def find(self, item: int) -> int:
        self.add(item)
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, a: int, b: int) -> int:
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return root_a
        # Always keep the smaller id as the canonical representative to retain determinism.
        if root_a < root_b:
            self._parent[root_b] = root_a
            return root_a
        self._parent[root_a] = root_b
        return root_b


class ComponentManager:
    """Tracks which chambers are joined by doors or corridors."""

    def __init__(self) -> None:
        self._dsu = DisjointSetUnion()
        self._chamber_count = 0

    def register_chamber(self) -> int:
        """Add a new, unconnected chamber and return its index."""
        index = self._chamber_count
        self._chamber_count += 1
        self._dsu.add(index)
        return index

    def _check(self, index: int) -> None:
        if not (0 <= index < self._chamber_count):
            raise IndexError(f"Chamber index {index} out of range")

    def connect(self, chamber_a: int, chamber_b: int) -> int:
        """Record a passage between two chambers and return the merged component id."""
        self._check(chamber_a)
        self._check(chamber_b)
        return self._dsu.union(chamber_a, chamber_b)

    def chamber_component(self, index: int) -> int:
        self._check(index)
        return self._dsu.find(index)

    def connected(self, chamber_a: int, chamber_b: int) -> bool:
        return self.chamber_component(chamber_a) == self.chamber_component(chamber_b)

    def has_single_component(self) -> bool:
        return len(self._active_components()) <= 1

    def _active_components(self) -> Set[int]:
        return {self._dsu.find(index) for index in range(self._chamber_count)}

    def component_summary(self) -> Dict[int, List[int]]:
        summary: Dict[int, List[int]] = defaultdict(list)
        for index in range(self._chamber_count):
            summary[self._dsu.find(index)].append(index)
        return dict(summary)

    def component_sizes(self) -> Dict[int, int]:
        return {root: len(members) for root, members in self.component_summary().items()}

    def total_components(self) -> int:
        return len(self._active_components())

    @property
    def chamber_count(self) -> int:
        return self._chamber_count
