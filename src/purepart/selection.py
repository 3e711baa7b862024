"""Pre-segmented BC7 shape selection from region label maps"""
from dataclasses import dataclass
from typing import List, Optional
import logging
import numpy as np

from .enums import BC7Mode, SEPARATE_ALPHA_MODES, THREE_SUBSET_MODES, TWO_SUBSET_MODES
from .partition import PartitionTable, canonicalize
from .registry import PartitionFormat, PartitionRegistry, default_registry
from .vptree import VantagePointTree


# BC7 block edge in texels
BLOCK_SIZE = 4

# Distinct regions a single block may straddle
MAX_REGIONS_PER_BLOCK = 6

# Blocks whose alpha never drops below this are treated as opaque
OPAQUE_ALPHA_THRESHOLD = 250

SELECTION_DTYPE = np.dtype([
    ('two_shape_index', np.int16),
    ('three_shape_index', np.int16),
    ('selected_modes', np.uint8),
])


@dataclass
class ShapeSelection:
    """Shape indices and the BC7 modes an encoder should still try for a block"""
    two_shape_index: int = 0
    three_shape_index: int = 0
    selected_modes: BC7Mode = BC7Mode.ALL


def _block_view(image: np.ndarray, x: int, y: int, width: int, height: int) -> np.ndarray:
    """
    Extract a block whose top-left texel is (x, y), replicating the image
    edge for blocks that run past the border.
    """
    image_height, image_width = image.shape[:2]
    if not (0 <= x < image_width and 0 <= y < image_height):
        raise ValueError(f"Block origin ({x}, {y}) outside {image_width}x{image_height} image")

    rows = np.minimum(np.arange(y, y + height), image_height - 1)
    cols = np.minimum(np.arange(x, x + width), image_width - 1)
    return image[np.ix_(rows, cols)]


def block_candidate(label_map, x: int, y: int,
                    width: int = BLOCK_SIZE, height: int = BLOCK_SIZE) -> PartitionTable:
    """
    Turn the region labels covering one block into a canonical candidate

    Args:
        label_map: (height, width) array of region ids, any integer values
        x: Block origin column in texels
        y: Block origin row in texels
        width: Block width
        height: Block height

    Returns:
        PartitionTable with index -1; it may use up to MAX_REGIONS_PER_BLOCK
        subsets, more than any format can encode
    """
    labels = np.asarray(label_map)
    if labels.ndim != 2:
        raise ValueError(f"Expected a 2-D label map, got {labels.ndim} dimension(s)")

    block = _block_view(labels, x, y, width, height).reshape(-1)
    _, region_ids = np.unique(block, return_inverse=True)
    canonical, num_regions = canonicalize(region_ids.reshape(-1))
    if num_regions > MAX_REGIONS_PER_BLOCK:
        raise ValueError(
            f"Block at ({x}, {y}) spans {num_regions} regions "
            f"(at most {MAX_REGIONS_PER_BLOCK} supported)")

    return PartitionTable(width, height, -1, canonical)


def _is_opaque(rgba: np.ndarray, x: int, y: int) -> bool:
    alpha = _block_view(rgba, x, y, BLOCK_SIZE, BLOCK_SIZE)[..., 3]
    return bool(np.all(alpha >= OPAQUE_ALPHA_THRESHOLD))


def choose_presegmented_shape(tree: VantagePointTree, label_map, x: int, y: int,
                              rgba: Optional[np.ndarray] = None) -> ShapeSelection:
    """
    Choose the BC7 shape that best follows the regions inside one block

    Args:
        tree: Vantage-point tree over the BPTC 4x4 partitions
        label_map: (height, width) array of region ids
        x: Block origin column in texels
        y: Block origin row in texels
        rgba: Optional (height, width, 4) uint8 image; when given and the
            block is opaque, the separate-alpha modes are turned off

    Returns:
        ShapeSelection for the block
    """
    candidate = block_candidate(label_map, x, y)
    result = ShapeSelection()

    if candidate.num_subsets == 1:
        # One region: only single-subset modes make sense
        result.selected_modes &= ~(TWO_SUBSET_MODES | THREE_SUBSET_MODES)
    else:
        closest = tree.search(candidate, 1)[0]
        if closest.num_subsets < 3:
            result.two_shape_index = closest.index
            result.selected_modes &= ~THREE_SUBSET_MODES
        else:
            result.three_shape_index = closest.index
            result.selected_modes &= ~TWO_SUBSET_MODES

    if rgba is not None and _is_opaque(np.asarray(rgba), x, y):
        result.selected_modes &= ~SEPARATE_ALPHA_MODES

    return result


def select_shapes(label_map, rgba: Optional[np.ndarray] = None,
                  registry: Optional[PartitionRegistry] = None) -> List[List[ShapeSelection]]:
    """
    Run shape selection over every 4x4 block of an image

    Args:
        label_map: (height, width) array of region ids
        rgba: Optional (height, width, 4) uint8 image matching label_map
        registry: Registry supplying the BPTC tree (default: process-wide)

    Returns:
        Rows of ShapeSelection, one row per block row
    """
    labels = np.asarray(label_map)
    if labels.ndim != 2:
        raise ValueError(f"Expected a 2-D label map, got {labels.ndim} dimension(s)")
    if rgba is not None:
        rgba = np.asarray(rgba)
        if rgba.ndim != 3 or rgba.shape[2] != 4 or rgba.shape[:2] != labels.shape:
            raise ValueError(
                f"RGBA image of shape {rgba.shape} does not match label map {labels.shape}")

    if registry is None:
        registry = default_registry
    tree = registry.tree(PartitionFormat.BPTC, BLOCK_SIZE, BLOCK_SIZE)

    height, width = labels.shape
    selections = []
    for y in range(0, height, BLOCK_SIZE):
        row = []
        for x in range(0, width, BLOCK_SIZE):
            row.append(choose_presegmented_shape(tree, labels, x, y, rgba))
        selections.append(row)

    logging.debug("Selected shapes for %d blocks", sum(len(row) for row in selections))
    return selections


def selections_to_array(selections: List[List[ShapeSelection]]) -> np.ndarray:
    """Pack rows of ShapeSelection into a (blocks_y, blocks_x) structured array"""
    blocks_y = len(selections)
    blocks_x = len(selections[0]) if blocks_y else 0
    output = np.zeros((blocks_y, blocks_x), dtype=SELECTION_DTYPE)
    for by, row in enumerate(selections):
        for bx, selection in enumerate(row):
            output[by, bx] = (selection.two_shape_index,
                              selection.three_shape_index,
                              int(selection.selected_modes))
    return output
