"""Process-wide cache of enumerated partitions and their search trees"""
from enum import Enum
from typing import Dict, List, Tuple, Union
import logging
import threading
import time

from .enumerators import ASTCEnumerator, BPTCEnumerator, PartitionEnumerator
from .partition import PartitionTable
from .vptree import VantagePointTree


class PartitionFormat(Enum):
    """Compressed formats with enumerable partitions"""
    ASTC = 'astc'
    BPTC = 'bptc'


_ENUMERATORS: Dict[PartitionFormat, PartitionEnumerator] = {
    PartitionFormat.ASTC: ASTCEnumerator(),
    PartitionFormat.BPTC: BPTCEnumerator(),
}


def _as_format(fmt: Union[PartitionFormat, str]) -> PartitionFormat:
    if isinstance(fmt, PartitionFormat):
        return fmt
    try:
        return PartitionFormat(str(fmt).lower())
    except ValueError:
        raise ValueError(f"Unknown partition format: {fmt!r}") from None


def get_enumerator(fmt: Union[PartitionFormat, str]) -> PartitionEnumerator:
    """Enumerator implementing a format"""
    return _ENUMERATORS[_as_format(fmt)]


class PartitionRegistry:
    """
    Lazily populated cache keyed by (format, width, height)

    Each entry is computed once and never modified afterwards; tables are
    frozen and handed out as tuples. Trees are only searched after
    construction, which is safe from several threads at once.
    """
    def __init__(self, seed: int = 0) -> None:
        self._seed = seed
        self._tables: Dict[Tuple[PartitionFormat, int, int], Tuple[PartitionTable, ...]] = {}
        self._trees: Dict[Tuple[PartitionFormat, int, int], VantagePointTree] = {}
        self._lock = threading.Lock()

    def partitions(self, fmt: Union[PartitionFormat, str], width: int, height: int
                   ) -> Tuple[PartitionTable, ...]:
        """Distinct canonical partitions for a format and block shape"""
        key = (_as_format(fmt), width, height)
        with self._lock:
            return self._partitions_locked(key)

    def _partitions_locked(self, key) -> Tuple[PartitionTable, ...]:
        tables = self._tables.get(key)
        if tables is None:
            fmt, width, height = key
            start = time.perf_counter()
            tables = tuple(_ENUMERATORS[fmt].enumerate(width, height))
            self._tables[key] = tables
            logging.info(
                "Enumerated %d %s %dx%d partitions in %.2f ms",
                len(tables), fmt.name, width, height,
                (time.perf_counter() - start) * 1000)
        return tables

    def tree(self, fmt: Union[PartitionFormat, str], width: int, height: int
             ) -> VantagePointTree:
        """Vantage-point tree over the partitions of a format and block shape"""
        key = (_as_format(fmt), width, height)
        with self._lock:
            tree = self._trees.get(key)
            if tree is None:
                tree = VantagePointTree(PartitionTable.distance, seed=self._seed)
                tree.build(self._partitions_locked(key))
                self._trees[key] = tree
            return tree

    def closest(self, fmt: Union[PartitionFormat, str], candidate: PartitionTable, k: int = 1
                ) -> Tuple[List[PartitionTable], List[float]]:
        """Nearest canonical partitions to ``candidate`` with their distances"""
        tree = self.tree(fmt, candidate.width, candidate.height)
        return tree.search(candidate, k, return_distances=True)

    def clear(self) -> None:
        """Drop every cached entry"""
        with self._lock:
            self._tables.clear()
            self._trees.clear()


default_registry = PartitionRegistry()


def enumerate_partitions(width: int, height: int,
                         fmt: Union[PartitionFormat, str] = PartitionFormat.ASTC
                         ) -> List[PartitionTable]:
    """
    Distinct canonical partitions for a block shape

    Args:
        width: Block width in texels
        height: Block height in texels
        fmt: PartitionFormat.ASTC (any shape up to 12x12) or
            PartitionFormat.BPTC (4x4 only)

    Returns:
        List of frozen PartitionTable, in order of first generating index
    """
    return list(default_registry.partitions(fmt, width, height))


def enumerate_astc(width: int, height: int) -> List[PartitionTable]:
    return enumerate_partitions(width, height, PartitionFormat.ASTC)


def enumerate_bptc(width: int = 4, height: int = 4) -> List[PartitionTable]:
    return enumerate_partitions(width, height, PartitionFormat.BPTC)
