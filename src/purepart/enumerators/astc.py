"""ASTC procedural partition enumerator"""
from typing import Tuple
import numpy as np
from numba import jit
from .base import PartitionEnumerator
from ..partition import MAX_BLOCK_DIM, MAX_SUBSETS


# Partition seeds covered by the enumeration (12-bit index space)
NUM_ASTC_SEEDS = 1 << 12

# Blocks with fewer texels than this hash doubled coordinates
SMALL_BLOCK_TEXELS = 31

# 2D block footprints defined by the ASTC specification
ASTC_BLOCK_FOOTPRINTS = (
    (4, 4), (5, 4), (5, 5), (6, 5), (6, 6),
    (8, 5), (8, 6), (8, 8),
    (10, 5), (10, 6), (10, 8), (10, 10),
    (12, 10), (12, 12),
)


# Module-level JIT-compiled helper functions
# Partition selection as specified in ASTC C.2.21
@jit(nopython=True, cache=True)
def hash52(p):
    """Integer mixer used to derive partition sub-seeds (32-bit wraparound)"""
    p &= 0xFFFFFFFF
    p ^= p >> 15
    p = (p - (p << 17)) & 0xFFFFFFFF
    p = (p + (p << 7)) & 0xFFFFFFFF
    p = (p + (p << 4)) & 0xFFFFFFFF
    p ^= p >> 5
    p = (p + (p << 16)) & 0xFFFFFFFF
    p ^= p >> 7
    p ^= p >> 3
    p = (p ^ (p << 6)) & 0xFFFFFFFF
    p ^= p >> 17
    return p


@jit(nopython=True, cache=True)
def select_subset(seed, x, y, z, partition_count, small_block):
    """Subset (0-3) that texel (x, y, z) belongs to for a partition seed"""
    if small_block:
        x <<= 1
        y <<= 1
        z <<= 1

    # May go negative for partition_count == 0; hash52 wraps it to 32 bits
    seed += (partition_count - 1) * 1024

    rnum = hash52(seed)
    seed1 = rnum & 0xF
    seed2 = (rnum >> 4) & 0xF
    seed3 = (rnum >> 8) & 0xF
    seed4 = (rnum >> 12) & 0xF
    seed5 = (rnum >> 16) & 0xF
    seed6 = (rnum >> 20) & 0xF
    seed7 = (rnum >> 24) & 0xF
    seed8 = (rnum >> 28) & 0xF
    seed9 = (rnum >> 18) & 0xF
    seed10 = (rnum >> 22) & 0xF
    seed11 = (rnum >> 26) & 0xF
    seed12 = ((rnum >> 30) | (rnum << 2)) & 0xF

    seed1 *= seed1
    seed2 *= seed2
    seed3 *= seed3
    seed4 *= seed4
    seed5 *= seed5
    seed6 *= seed6
    seed7 *= seed7
    seed8 *= seed8
    seed9 *= seed9
    seed10 *= seed10
    seed11 *= seed11
    seed12 *= seed12

    if seed & 1:
        sh1 = 4 if seed & 2 else 5
        sh2 = 6 if partition_count == 3 else 5
    else:
        sh1 = 6 if partition_count == 3 else 5
        sh2 = 4 if seed & 2 else 5
    sh3 = sh1 if seed & 0x10 else sh2

    seed1 >>= sh1
    seed2 >>= sh2
    seed3 >>= sh1
    seed4 >>= sh2
    seed5 >>= sh1
    seed6 >>= sh2
    seed7 >>= sh1
    seed8 >>= sh2
    seed9 >>= sh3
    seed10 >>= sh3
    seed11 >>= sh3
    seed12 >>= sh3

    a = (seed1 * x + seed2 * y + seed11 * z + (rnum >> 14)) & 0x3F
    b = (seed3 * x + seed4 * y + seed12 * z + (rnum >> 10)) & 0x3F
    c = (seed5 * x + seed6 * y + seed9 * z + (rnum >> 6)) & 0x3F
    d = (seed7 * x + seed8 * y + seed10 * z + (rnum >> 2)) & 0x3F

    if partition_count < 4:
        d = 0
    if partition_count < 3:
        c = 0

    # Earliest maximum wins
    if a >= b and a >= c and a >= d:
        return 0
    elif b >= c and b >= d:
        return 1
    elif c >= d:
        return 2
    return 3


@jit(nopython=True, cache=True)
def _fill_raw_tables(width, height):
    """JIT-compiled hash evaluation for every seed and texel of a block"""
    small_block = width * height < SMALL_BLOCK_TEXELS
    output = np.zeros((NUM_ASTC_SEEDS, width * height), dtype=np.uint8)

    for seed in range(NUM_ASTC_SEEDS):
        partition_count = seed & 0x3
        for y in range(height):
            for x in range(width):
                output[seed, y * width + x] = select_subset(
                    seed, x, y, 0, partition_count, small_block)

    return output


class ASTCEnumerator(PartitionEnumerator):
    """
    ASTC partition enumerator

    Every 12-bit seed is run through the procedural partition function with
    ``seed & 3`` as the partition count. Any 2D block shape up to 12x12 is
    accepted, which covers all of ``ASTC_BLOCK_FOOTPRINTS``.
    """
    name = 'ASTC'
    max_raw_label = MAX_SUBSETS

    def supports(self, width: int, height: int) -> bool:
        return 1 <= width <= MAX_BLOCK_DIM and 1 <= height <= MAX_BLOCK_DIM

    def raw_tables(self, width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
        indices = np.arange(NUM_ASTC_SEEDS, dtype=np.int64)
        return indices, _fill_raw_tables(width, height)
