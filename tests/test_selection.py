import numpy as np
import pytest

from purepart.enums import BC7Mode, SEPARATE_ALPHA_MODES, THREE_SUBSET_MODES, TWO_SUBSET_MODES
from purepart.enumerators import PARTITION_TABLE_3
from purepart.registry import PartitionFormat, PartitionRegistry
from purepart.selection import (
    SELECTION_DTYPE,
    ShapeSelection,
    block_candidate,
    choose_presegmented_shape,
    select_shapes,
    selections_to_array,
)


@pytest.fixture(scope="module")
def registry():
    return PartitionRegistry()


@pytest.fixture(scope="module")
def tree(registry):
    return registry.tree(PartitionFormat.BPTC, 4, 4)


def test_default_selection():
    selection = ShapeSelection()
    assert selection.two_shape_index == 0
    assert selection.three_shape_index == 0
    assert selection.selected_modes == BC7Mode.ALL


def test_block_candidate_canonicalizes_region_ids():
    labels = np.array([
        [90, 90, 12, 12],
        [90, 90, 12, 12],
        [-4, -4, 12, 12],
        [-4, -4, -4, -4],
    ])
    candidate = block_candidate(labels, 0, 0)
    assert candidate.index == -1
    assert candidate.labels.tolist() == [0, 0, 1, 1, 0, 0, 1, 1, 2, 2, 1, 1, 2, 2, 2, 2]


def test_block_candidate_replicates_edges():
    labels = np.zeros((5, 6), dtype=np.int32)
    labels[:, 5] = 1
    candidate = block_candidate(labels, 4, 4)
    assert candidate.to_grid().tolist() == [[0, 1, 1, 1]] * 4


def test_block_candidate_errors():
    with pytest.raises(ValueError):
        block_candidate(np.zeros(16), 0, 0)
    with pytest.raises(ValueError):
        block_candidate(np.zeros((4, 4)), 4, 0)
    with pytest.raises(ValueError):
        block_candidate(np.arange(16).reshape(4, 4), 0, 0)


def test_block_candidate_allows_six_regions():
    labels = np.array([
        [0, 0, 1, 1],
        [2, 2, 3, 3],
        [4, 4, 5, 5],
        [4, 4, 5, 5],
    ])
    assert block_candidate(labels, 0, 0).num_subsets == 6


def test_single_region(tree):
    labels = np.full((4, 4), 7)
    selection = choose_presegmented_shape(tree, labels, 0, 0)
    assert selection.selected_modes == BC7Mode.MODE4 | BC7Mode.MODE5 | BC7Mode.MODE6
    assert not selection.selected_modes & (TWO_SUBSET_MODES | THREE_SUBSET_MODES)


def test_two_regions(tree):
    labels = np.array([[7] * 4] * 2 + [[3] * 4] * 2)
    selection = choose_presegmented_shape(tree, labels, 0, 0)
    assert selection.two_shape_index == 13
    assert selection.selected_modes & TWO_SUBSET_MODES == TWO_SUBSET_MODES
    assert not selection.selected_modes & THREE_SUBSET_MODES


def test_three_regions(tree):
    region_ids = np.array([10, 20, 30])
    labels = region_ids[PARTITION_TABLE_3[0].reshape(4, 4)]
    selection = choose_presegmented_shape(tree, labels, 0, 0)
    assert selection.three_shape_index == 0
    assert selection.selected_modes & THREE_SUBSET_MODES == THREE_SUBSET_MODES
    assert not selection.selected_modes & TWO_SUBSET_MODES


def test_opaque_block_drops_separate_alpha(tree):
    labels = np.full((4, 4), 1)
    rgba = np.full((4, 4, 4), 255, dtype=np.uint8)
    selection = choose_presegmented_shape(tree, labels, 0, 0, rgba)
    assert selection.selected_modes == BC7Mode.MODE6

    rgba[2, 3, 3] = 100
    selection = choose_presegmented_shape(tree, labels, 0, 0, rgba)
    assert selection.selected_modes & SEPARATE_ALPHA_MODES == SEPARATE_ALPHA_MODES


def test_select_shapes(registry):
    labels = np.zeros((12, 8), dtype=np.int64)
    labels[4:8, 4:] = 1
    labels[6:8, 4:] = 2
    selections = select_shapes(labels, registry=registry)

    assert len(selections) == 3
    assert all(len(row) == 2 for row in selections)
    assert selections[1][1].two_shape_index == 13
    assert not selections[0][0].selected_modes & TWO_SUBSET_MODES

    packed = selections_to_array(selections)
    assert packed.dtype == SELECTION_DTYPE
    assert packed.shape == (3, 2)
    assert packed[1, 1]['two_shape_index'] == 13
    assert packed[0, 0]['selected_modes'] == int(selections[0][0].selected_modes)


def test_select_shapes_partial_blocks(registry):
    selections = select_shapes(np.zeros((5, 6)), registry=registry)
    assert len(selections) == 2
    assert all(len(row) == 2 for row in selections)


def test_select_shapes_rgba_mismatch(registry):
    with pytest.raises(ValueError):
        select_shapes(np.zeros((4, 4)), np.zeros((4, 8, 4), dtype=np.uint8), registry=registry)
