"""Base class for partition enumeration"""
from abc import ABC, abstractmethod
from typing import List, Tuple
import logging
import time
import numpy as np

from ..exceptions import SubsetCountError, SubsetLabelError
from ..partition import MAX_SUBSETS, PartitionTable, canonicalize_rows


class PartitionEnumerator(ABC):
    """Base class for partition enumeration"""

    #: Short format name used in log messages and the registry
    name: str = ''

    #: Raw labels produced by the format must be strictly below this value
    max_raw_label: int = MAX_SUBSETS

    @abstractmethod
    def supports(self, width: int, height: int) -> bool:
        """Whether the format defines partitions for this block shape"""
        pass

    @abstractmethod
    def raw_tables(self, width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Produce every raw (not yet canonical) labelling for a block shape

        Args:
            width: Block width in texels
            height: Block height in texels

        Returns:
            Tuple of (generating indices with shape (n,),
                      uint8 labels with shape (n, width * height))
        """
        pass

    def enumerate(self, width: int, height: int) -> List[PartitionTable]:
        """
        Enumerate the distinct canonical partitions for a block shape

        The first generating index that yields a given canonical table wins;
        later duplicates are discarded along with their index.
        """
        if not self.supports(width, height):
            raise ValueError(f"{self.name} does not define partitions for {width}x{height} blocks")

        start = time.perf_counter()
        indices, rows = self.raw_tables(width, height)

        bad = np.nonzero(rows >= self.max_raw_label)
        if bad[0].size:
            row, pixel = bad[0][0], bad[1][0]
            raise SubsetLabelError(
                f"{self.name} index {indices[row]} assigns subset {rows[row, pixel]} "
                f"to texel {pixel} (limit {self.max_raw_label - 1})")

        counts = canonicalize_rows(rows)
        if counts.size and counts.max() > MAX_SUBSETS:
            row = int(np.argmax(counts))
            raise SubsetCountError(
                f"{self.name} index {indices[row]} uses {counts[row]} subsets")

        # Insertion-ordered dedup keyed on the canonical label bytes
        unique = {}
        for index, row in zip(indices, rows):
            key = row.tobytes()
            if key not in unique:
                unique[key] = PartitionTable(width, height, int(index), row.copy()).freeze()

        results = list(unique.values())
        logging.debug(
            "%s %dx%d: %d raw tables -> %d distinct (%.2f ms)",
            self.name, width, height, len(rows), len(results),
            (time.perf_counter() - start) * 1000)
        return results
