"""purepart - ASTC / BPTC block partition enumeration and nearest-partition matching"""

__version__ = "0.1.0"

# Partition tables
from .partition import (
    MAX_SUBSETS,
    PartitionTable,
    canonicalize,
)

# Enumerators
from .enumerators import (
    ASTC_BLOCK_FOOTPRINTS,
    ASTCEnumerator,
    BPTCEnumerator,
    PartitionEnumerator,
    hash52,
    select_subset,
)

# Metric index
from .vptree import VantagePointTree

# Cached enumeration and lookup
from .registry import (
    PartitionFormat,
    PartitionRegistry,
    default_registry,
    enumerate_astc,
    enumerate_bptc,
    enumerate_partitions,
)

# Shape selection from region label maps
from .enums import BC7Mode
from .selection import (
    ShapeSelection,
    block_candidate,
    choose_presegmented_shape,
    select_shapes,
)

from .exceptions import (
    PartitionSpecError,
    SubsetCountError,
    SubsetLabelError,
)

# CLI entry point
from .cli import main

__all__ = [
    '__version__',
    'MAX_SUBSETS',
    'PartitionTable',
    'canonicalize',
    'ASTC_BLOCK_FOOTPRINTS',
    'ASTCEnumerator',
    'BPTCEnumerator',
    'PartitionEnumerator',
    'hash52',
    'select_subset',
    'VantagePointTree',
    'PartitionFormat',
    'PartitionRegistry',
    'default_registry',
    'enumerate_astc',
    'enumerate_bptc',
    'enumerate_partitions',
    'BC7Mode',
    'ShapeSelection',
    'block_candidate',
    'choose_presegmented_shape',
    'select_shapes',
    'PartitionSpecError',
    'SubsetCountError',
    'SubsetLabelError',
    'main',
]
