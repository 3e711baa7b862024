"""Partition tables and their canonical form"""
from typing import Optional, Sequence, Tuple
import numpy as np
from numba import jit


# Largest number of subsets any supported format can address
MAX_SUBSETS = 4

# Largest block edge in texels (ASTC 12x12)
MAX_BLOCK_DIM = 12


@jit(nopython=True, cache=True)
def _canonicalize_rows(rows):
    """
    Relabel every row of a 2-D uint8 array in place so that subsets are
    numbered in order of first appearance. Returns the subset count per row.
    """
    num_rows, size = rows.shape
    counts = np.zeros(num_rows, dtype=np.int64)
    mapping = np.empty(256, dtype=np.int64)

    for r in range(num_rows):
        mapping[:] = -1
        next_label = 0
        for i in range(size):
            raw = rows[r, i]
            if mapping[raw] < 0:
                mapping[raw] = next_label
                next_label += 1
            rows[r, i] = mapping[raw]
        counts[r] = next_label

    return counts


def canonicalize_rows(rows: np.ndarray) -> np.ndarray:
    """
    Canonicalize a stack of raw label rows in place.

    Args:
        rows: uint8 array of shape (num_tables, width * height)

    Returns:
        int64 array with the number of distinct subsets of each row
    """
    return _canonicalize_rows(rows)


def canonicalize(labels) -> Tuple[np.ndarray, int]:
    """
    Produce the canonical form of a raw labelling.

    Pixels are scanned in traversal order and each raw label is replaced by
    the order in which it was first seen, so two labellings that only differ
    by a permutation of subset identities map to the same result.

    Args:
        labels: Sequence of small non-negative integers (< 256)

    Returns:
        Tuple of (canonical uint8 labels, number of distinct subsets)
    """
    raw = np.asarray(labels)
    if raw.size and (raw.min() < 0 or raw.max() > 255):
        raise ValueError("Labels must lie in the range 0..255")

    rows = np.array(raw, dtype=np.uint8).reshape(1, -1)
    counts = _canonicalize_rows(rows)
    return rows[0], int(counts[0])


class PartitionTable:
    """
    Per-texel subset assignment for a single block shape.

    Labels are stored row-major (``y * width + x``). Two tables compare equal
    when their shape and labels match; the generating index is informational
    only, which is what lets different indices collapse onto one table.
    """
    __slots__ = ('width', 'height', 'index', 'labels')

    def __init__(self, width: int, height: int, index: int = -1,
                 labels: Optional[Sequence[int]] = None) -> None:
        if not (1 <= width <= MAX_BLOCK_DIM and 1 <= height <= MAX_BLOCK_DIM):
            raise ValueError(f"Unsupported block shape {width}x{height}")

        self.width: int = width
        self.height: int = height
        self.index: int = int(index)  # Seed or shape index, -1 when unset

        size = width * height
        if labels is None:
            self.labels: np.ndarray = np.zeros(size, dtype=np.uint8)
        else:
            data = np.asarray(labels)
            if data.size != size:
                raise ValueError(
                    f"Expected {size} labels for a {width}x{height} block, got {data.size}")
            if data.size and not np.issubdtype(data.dtype, np.integer):
                raise ValueError(f"Labels must be integers, got dtype {data.dtype}")
            if data.size and (data.min() < 0 or data.max() > 255):
                raise ValueError("Labels must lie in the range 0..255")
            self.labels = np.array(data, dtype=np.uint8).reshape(size)

    @classmethod
    def from_grid(cls, grid, index: int = -1) -> 'PartitionTable':
        """Build a table from a (height, width) array of labels"""
        grid = np.asarray(grid)
        if grid.ndim != 2:
            raise ValueError(f"Expected a 2-D label grid, got {grid.ndim} dimension(s)")
        height, width = grid.shape
        return cls(width, height, index, grid.reshape(-1))

    def __len__(self) -> int:
        return self.labels.size

    def __getitem__(self, idx: int) -> int:
        return int(self.labels[idx])

    def __setitem__(self, idx: int, value: int) -> None:
        self.labels[idx] = value

    def __eq__(self, other) -> bool:
        if not isinstance(other, PartitionTable):
            return NotImplemented
        return (self.width == other.width and
                self.height == other.height and
                np.array_equal(self.labels, other.labels))

    def __hash__(self) -> int:
        # Labels may still change until the table is frozen
        if not self.frozen:
            raise TypeError("unhashable type: mutable PartitionTable (call freeze() first)")
        return hash((self.width, self.height, self.labels.tobytes()))

    def __repr__(self) -> str:
        digits = ''.join(str(int(v)) for v in self.labels)
        return f"PartitionTable({self.width}x{self.height}, index={self.index}, labels='{digits}')"

    @property
    def frozen(self) -> bool:
        return not self.labels.flags.writeable

    def freeze(self) -> 'PartitionTable':
        """Make the labels read-only; further item assignment raises ValueError"""
        self.labels.setflags(write=False)
        return self

    def copy(self) -> 'PartitionTable':
        """Return a mutable copy with the same shape, index and labels"""
        return PartitionTable(self.width, self.height, self.index, self.labels.copy())

    @property
    def num_subsets(self) -> int:
        """Number of distinct subsets used by the table"""
        return int(np.unique(self.labels).size)

    def is_canonical(self) -> bool:
        canonical, _ = canonicalize(self.labels)
        return np.array_equal(canonical, self.labels)

    def canonical(self) -> 'PartitionTable':
        """Return the canonical form of this table, keeping its index"""
        canonical, _ = canonicalize(self.labels)
        return PartitionTable(self.width, self.height, self.index, canonical)

    def to_grid(self) -> np.ndarray:
        """Labels as a (height, width) array"""
        return self.labels.reshape(self.height, self.width)

    @staticmethod
    def distance(a: 'PartitionTable', b: 'PartitionTable') -> float:
        """Number of texels whose labels differ (Hamming distance)"""
        if a.width != b.width or a.height != b.height:
            raise ValueError(
                f"Cannot compare a {a.width}x{a.height} table with a {b.width}x{b.height} table")
        return float(np.count_nonzero(a.labels != b.labels))
