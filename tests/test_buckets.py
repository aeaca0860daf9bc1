import pytest

from budsim.buckets import BucketIndexer, expand, neighbor_bucket


def test_rank_zero_is_the_bucket_itself():
    assert neighbor_bucket(13, 0, 3, 3, 3) == 13
    assert neighbor_bucket(13, 27, 3, 3, 3) == 13


def test_interior_bucket_sees_whole_3x3x3_block():
    neighbours = {neighbor_bucket(13, r, 3, 3, 3) for r in range(27)}
    assert neighbours == set(range(27))


def test_corner_bucket_wraps_periodically():
    neighbours = {neighbor_bucket(0, r, 3, 3, 3) for r in range(27)}
    assert neighbours == set(range(27))


def test_rank_is_taken_modulo_27():
    for r in range(27):
        assert neighbor_bucket(21, r, 4, 4, 4) == neighbor_bucket(21, r + 54, 4, 4, 4)


def test_left_neighbour_wraps_in_x():
    assert neighbor_bucket(0, 8, 4, 4, 4) == 3


def test_neighbour_relation_is_symmetric_in_large_grid():
    neighbours = [neighbor_bucket(21, r, 4, 4, 4) for r in range(27)]
    assert len(set(neighbours)) == 27
    for n in neighbours:
        back = {neighbor_bucket(n, r, 4, 4, 4) for r in range(27)}
        assert 21 in back


def test_negative_rank_rejected():
    with pytest.raises(ValueError):
        neighbor_bucket(0, -1, 3, 3, 3)


@pytest.fixture
def indexer():
    return BucketIndexer(0.0, 4.0, 0.0, 4.0, 0.0, 4.0, 4, 4, 4, 1.0)


def test_indexer_origin_cell(indexer):
    assert indexer(0.2, 0.3, 0.9, 7) == (0, 7)


def test_indexer_inner_cell(indexer):
    assert indexer(1.5, 2.5, 3.5, 11) == (57, 11)


def test_indexer_minus_one_maps_to_zero(indexer):
    assert indexer(-1.5, 0.0, 0.0, 2) == (0, 2)


def test_expand_repeats_values():
    assert expand([2, 0, 3], ["a", "b", "c"]) == ["a", "a", "c", "c", "c"]


def test_expand_length_is_total_count():
    counts = [1, 4, 0, 2]
    assert len(expand(counts, [10, 20, 30, 40])) == sum(counts)


def test_expand_rejects_negative_count():
    with pytest.raises(ValueError):
        expand([1, -1], [0, 1])


def test_expand_rejects_short_values():
    with pytest.raises(ValueError):
        expand([1, 1, 1], [0, 1])