"""Partition enumerator implementations"""
from .base import PartitionEnumerator
from .astc import ASTCEnumerator, ASTC_BLOCK_FOOTPRINTS, hash52, select_subset
from .bptc import BPTCEnumerator, PARTITION_TABLE_2, PARTITION_TABLE_3, get_subset_for_index

__all__ = [
    'PartitionEnumerator',
    'ASTCEnumerator',
    'BPTCEnumerator',
    'ASTC_BLOCK_FOOTPRINTS',
    'PARTITION_TABLE_2',
    'PARTITION_TABLE_3',
    'get_subset_for_index',
    'hash52',
    'select_subset',
]
