import numpy as np
import pytest

from purepart.enumerators import (
    ASTCEnumerator,
    BPTCEnumerator,
    PARTITION_TABLE_2,
    PARTITION_TABLE_3,
    PartitionEnumerator,
    get_subset_for_index,
    select_subset,
)
from purepart.exceptions import PartitionSpecError, SubsetCountError, SubsetLabelError
from purepart.partition import canonicalize


def digits(table):
    return ''.join(str(int(v)) for v in table.labels)


@pytest.fixture(scope="module")
def astc_4x4():
    return ASTCEnumerator().enumerate(4, 4)


@pytest.fixture(scope="module")
def bptc_4x4():
    return BPTCEnumerator().enumerate(4, 4)


@pytest.mark.parametrize(
    "width,height,expectation",
    [(4, 4, 1288), (5, 4, 1804), (5, 5, 2272), (6, 5, 2569), (6, 6, 1775),
     (8, 8, 2544), (10, 10, 2965), (12, 12, 3212)],
)
def test_astc_distinct_counts(width, height, expectation):
    assert len(ASTCEnumerator().enumerate(width, height)) == expectation


def test_astc_first_occurrence_wins(astc_4x4):
    # Seeds 4, 5 and 6 repeat earlier tables and are dropped
    assert [(t.index, digits(t)) for t in astc_4x4[:6]] == [
        (0, "0000000000000000"),
        (1, "0000111111110000"),
        (2, "0011001101110111"),
        (3, "0000000100210221"),
        (7, "0110011001110111"),
        (8, "0110110011001001"),
    ]


def test_astc_matches_brute_force(astc_4x4):
    expected = {}
    for seed in range(4096):
        raw = [select_subset(seed, x, y, 0, seed & 3, True) for y in range(4) for x in range(4)]
        canonical, _ = canonicalize(raw)
        expected.setdefault(canonical.tobytes(), seed)

    assert len(expected) == len(astc_4x4)
    assert [t.index for t in astc_4x4] == list(expected.values())


def test_astc_tables_are_distinct_and_canonical(astc_4x4):
    assert len(set(astc_4x4)) == len(astc_4x4)
    for table in astc_4x4:
        assert table.is_canonical()
        assert table.frozen
        used = sorted(set(table.labels.tolist()))
        assert used == list(range(len(used)))
        assert 1 <= len(used) <= max(table.index & 3, 2)


@pytest.mark.parametrize("width,height", [(12, 12), (10, 5), (3, 7)])
def test_astc_other_shapes(width, height):
    tables = ASTCEnumerator().enumerate(width, height)
    assert tables
    assert tables[0].index == 0
    assert all(len(t) == width * height for t in tables)
    assert len(set(tables)) == len(tables)


@pytest.mark.parametrize("width,height", [(13, 4), (4, 0)])
def test_astc_unsupported_shape(width, height):
    with pytest.raises(ValueError):
        ASTCEnumerator().enumerate(width, height)


def test_bptc_count(bptc_4x4):
    assert len(bptc_4x4) == 128
    assert [t.index for t in bptc_4x4] == list(range(64)) * 2
    assert all(t.num_subsets == 2 for t in bptc_4x4[:64])
    assert all(t.num_subsets == 3 for t in bptc_4x4[64:])


def test_bptc_tables_are_canonical(bptc_4x4):
    # 2-subset shapes are already canonical
    for i, table in enumerate(bptc_4x4[:64]):
        assert table.labels.tolist() == PARTITION_TABLE_2[i].tolist()

    # 3-subset shape 2 lists subset 2 before subset 1
    assert PARTITION_TABLE_3[2].tolist() == [0, 0, 0, 0, 2, 0, 0, 1, 2, 2, 1, 1, 2, 2, 1, 1]
    assert digits(bptc_4x4[64 + 2]) == "0000100211221122"

    for table in bptc_4x4:
        assert table.is_canonical()


def test_bptc_tables_not_mutated(bptc_4x4):
    assert PARTITION_TABLE_3[2, 4] == 2


@pytest.mark.parametrize("width,height", [(5, 5), (8, 8), (4, 8)])
def test_bptc_only_4x4(width, height):
    with pytest.raises(ValueError):
        BPTCEnumerator().enumerate(width, height)


def test_get_subset_for_index():
    assert get_subset_for_index(15, 13, 2) == 1
    assert get_subset_for_index(0, 13, 2) == 0
    assert get_subset_for_index(4, 2, 3) == 2
    assert get_subset_for_index(7, 40, 1) == 0
    with pytest.raises(ValueError):
        get_subset_for_index(0, 64, 2)
    with pytest.raises(ValueError):
        get_subset_for_index(0, 0, 4)


class _FixedEnumerator(PartitionEnumerator):
    name = 'TEST'

    def __init__(self, rows, max_raw_label):
        self.rows = np.array(rows, dtype=np.uint8)
        self.max_raw_label = max_raw_label

    def supports(self, width, height):
        return (width, height) == (2, 2)

    def raw_tables(self, width, height):
        return np.arange(len(self.rows)), self.rows.copy()


def test_raw_label_out_of_range():
    enumerator = _FixedEnumerator([[0, 1, 1, 0], [0, 3, 1, 2]], max_raw_label=3)
    with pytest.raises(SubsetLabelError):
        enumerator.enumerate(2, 2)


def test_too_many_subsets():
    # Only reachable with a table larger than any real format produces
    enumerator = _FixedEnumerator([[0, 1, 2, 3]], max_raw_label=8)
    assert len(enumerator.enumerate(2, 2)) == 1

    enumerator = _FixedEnumerator([[0, 1, 2, 3], [1, 2, 3, 4]], max_raw_label=8)
    assert len(enumerator.enumerate(2, 2)) == 1

    class _WideEnumerator(_FixedEnumerator):
        def supports(self, width, height):
            return (width, height) == (5, 1)

    enumerator = _WideEnumerator([[4, 3, 2, 1, 0]], max_raw_label=8)
    with pytest.raises(SubsetCountError):
        enumerator.enumerate(5, 1)


def test_spec_errors_share_a_base():
    assert issubclass(SubsetLabelError, PartitionSpecError)
    assert issubclass(SubsetCountError, PartitionSpecError)


def test_dedup_keeps_first_index():
    enumerator = _FixedEnumerator([[0, 0, 1, 1], [1, 1, 0, 0], [2, 2, 2, 2], [0, 0, 0, 0]],
                                  max_raw_label=4)
    tables = enumerator.enumerate(2, 2)
    assert [(t.index, digits(t)) for t in tables] == [(0, "0011"), (2, "0000")]
