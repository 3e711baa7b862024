import pytest

from purepart.enumerators.astc import hash52, select_subset


@pytest.mark.parametrize(
    "value,expectation",
    [
        (0, 0),
        (1, 205976931),
        (2, 3869477456),
        (1024, 3174908739),
        (12345, 3579584485),
        # -1024 wrapped to 32 bits, as produced by a zero partition count
        (4294966272, 2070963845),
        (-1024, 2070963845),
    ],
)
def test_hash52(value, expectation):
    assert hash52(value) == expectation


@pytest.mark.parametrize(
    "seed,x,y,z,partition_count,small_block,expectation",
    [
        (5, 1, 2, 0, 2, True, 0),
        (5, 1, 2, 0, 2, False, 1),
        (7, 3, 3, 0, 3, True, 2),
        (11, 0, 1, 0, 4, True, 0),
        (600, 7, 2, 0, 3, False, 2),
        (0, 1, 1, 0, 0, True, 1),
        (1234, 9, 11, 0, 4, False, 1),
    ],
)
def test_select_subset(seed, x, y, z, partition_count, small_block, expectation):
    assert select_subset(seed, x, y, z, partition_count, small_block) == expectation


def test_select_subset_zero_hash_picks_first_subset():
    # seed 0 with one partition hashes 0, so every weighted sum is 0
    for y in range(12):
        for x in range(12):
            assert select_subset(0, x, y, 0, 1, False) == 0


def test_select_subset_deterministic():
    for seed in range(0, 4096, 97):
        first = [select_subset(seed, x, y, 0, seed & 3, True) for y in range(4) for x in range(4)]
        second = [select_subset(seed, x, y, 0, seed & 3, True) for y in range(4) for x in range(4)]
        assert first == second


@pytest.mark.parametrize("partition_count", [0, 1, 2, 3, 4])
def test_select_subset_respects_partition_count(partition_count):
    # Subsets c and d are forced to zero below 3 and 4 partitions
    limit = max(partition_count, 2)
    for seed in range(0, 1024, 13):
        for y in range(6):
            for x in range(6):
                subset = select_subset(seed, x, y, 0, partition_count, False)
                assert 0 <= subset < limit
