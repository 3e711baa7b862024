"""
Vantage-point tree for exact k-nearest-neighbour search in a metric space.

After Yianilos, "Data Structures and Algorithms for Nearest Neighbor Search in
General Metric Spaces". Each node splits the items below it at the median
distance to a pivot; queries prune subtrees with the triangle inequality, so
the distance function must be a true metric.

Ties in distance are ordered by the position of the item in the tree's
internal storage. Storage order only depends on the input order and the
seed, so a tree rebuilt from the same items with the same seed answers every
query identically.
"""
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar, Union
import heapq
import logging
import math
import numpy as np


T = TypeVar('T')


class _Node:
    """Pivot position, median threshold and the two subtrees"""
    __slots__ = ('index', 'threshold', 'left', 'right')

    def __init__(self, index: int) -> None:
        self.index: int = index
        self.threshold: float = 0.0
        self.left: Optional['_Node'] = None
        self.right: Optional['_Node'] = None


class VantagePointTree(Generic[T]):
    """
    Metric tree over arbitrary items

    Args:
        distance: Symmetric, non-negative function obeying the triangle
            inequality, returning a float
        seed: Seed for pivot selection; None draws fresh entropy on every
            build
    """

    def __init__(self, distance: Callable[[T, T], float], seed: Optional[int] = 0) -> None:
        self._distance = distance
        self._seed = seed
        self._items: List[T] = []
        self._root: Optional[_Node] = None
        self._rng = np.random.default_rng(seed)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> Tuple[T, ...]:
        """Items in internal storage order"""
        return tuple(self._items)

    def build(self, items: Sequence[T]) -> None:
        """Replace the tree with one built over a copy of ``items``"""
        self._root = None
        self._items = list(items)
        self._rng = np.random.default_rng(self._seed)
        self._root = self._build(0, len(self._items))
        logging.debug("Built vantage-point tree over %d items", len(self._items))

    def _build(self, lower: int, upper: int) -> Optional[_Node]:
        if upper == lower:
            return None

        node = _Node(lower)

        if upper - lower > 1:
            items = self._items

            # Random pivot, moved to the start of the range
            i = int(self._rng.integers(lower, upper))
            items[lower], items[i] = items[i], items[lower]

            median = (upper + lower) // 2
            pivot = items[lower]
            rest = items[lower + 1:upper]

            # Partial sort around the median distance
            dists = np.fromiter((self._distance(pivot, item) for item in rest),
                                dtype=np.float64, count=len(rest))
            kth = median - lower - 1
            order = np.argpartition(dists, kth)
            items[lower + 1:upper] = [rest[j] for j in order]

            node.threshold = float(dists[order[kth]])
            node.left = self._build(lower + 1, median)
            node.right = self._build(median, upper)

        return node

    def search(self, target: T, k: int, return_distances: bool = False
               ) -> Union[List[T], Tuple[List[T], List[float]]]:
        """
        Find the ``k`` items closest to ``target``, nearest first

        Args:
            target: Query item
            k: Number of neighbours; fewer are returned if the tree is smaller
            return_distances: Also return the matching distances

        Returns:
            List of items, or a tuple of (items, distances)
        """
        heap: List[Tuple[float, int]] = []
        if k > 0 and self._root is not None:
            self._search(self._root, target, k, heap)

        # The heap holds negated keys; ascending keys are nearest first
        ordered = sorted((-neg_dist, -neg_index) for neg_dist, neg_index in heap)
        results = [self._items[index] for _, index in ordered]

        if return_distances:
            return results, [dist for dist, _ in ordered]
        return results

    def _search(self, node: _Node, target: T, k: int, heap: List[Tuple[float, int]]) -> None:
        dist = self._distance(self._items[node.index], target)

        # Max-heap on (distance, position) via negation
        if len(heap) < k:
            heapq.heappush(heap, (-dist, -node.index))
        elif (dist, node.index) < (-heap[0][0], -heap[0][1]):
            heapq.heapreplace(heap, (-dist, -node.index))

        if node.left is None and node.right is None:
            return

        if dist < node.threshold:
            if node.left is not None and dist - self._tau(heap, k) <= node.threshold:
                self._search(node.left, target, k, heap)
            if node.right is not None and dist + self._tau(heap, k) >= node.threshold:
                self._search(node.right, target, k, heap)
        else:
            if node.right is not None and dist + self._tau(heap, k) >= node.threshold:
                self._search(node.right, target, k, heap)
            if node.left is not None and dist - self._tau(heap, k) <= node.threshold:
                self._search(node.left, target, k, heap)

    @staticmethod
    def _tau(heap: List[Tuple[float, int]], k: int) -> float:
        """Current k-th best distance, infinite until k items have been seen"""
        if len(heap) < k:
            return math.inf
        return -heap[0][0]
