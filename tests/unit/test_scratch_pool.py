"""Tests for per-level scratch buffer reuse."""

import pytest

from closestpair import IndexedPoint, ScratchPool


def _items(coords):
    return [IndexedPoint(i, (float(x), float(-x))) for i, x in enumerate(coords)]


def test_pool_has_one_distinct_buffer_per_level():
    pool = ScratchPool(3)
    assert pool.dimension == 3
    assert pool.capacity == (0, 0, 0)
    buffers = [pool.buffer(level) for level in (1, 2, 3)]
    assert len({id(buffer) for buffer in buffers}) == 3


def test_pool_rejects_invalid_dimension_and_level():
    with pytest.raises(ValueError, match="dimension must be >= 1"):
        ScratchPool(0)
    pool = ScratchPool(2)
    with pytest.raises(ValueError, match="level must lie in"):
        pool.buffer(0)
    with pytest.raises(ValueError, match="level must lie in"):
        pool.load(3, _items([1.0]))


def test_load_overwrites_front_and_never_shrinks():
    pool = ScratchPool(2)
    source = _items([5, 4, 3, 2, 1, 0])

    assert pool.load(1, source) == 6
    assert pool.capacity == (6, 0)
    buffer = pool.buffer(1)

    assert pool.load(1, source, 1, 3) == 2
    assert pool.buffer(1) is buffer
    assert pool.capacity == (6, 0)
    assert [item.index for item in buffer[:2]] == [1, 2]


def test_sort_orders_only_the_active_prefix():
    pool = ScratchPool(2)
    pool.load(2, _items([9, 8, 7, 6]))
    size = pool.load(2, _items([3, 1, 2]))
    pool.sort(2, size, axis=0)

    buffer = pool.buffer(2)
    assert [item.point[0] for item in buffer[:size]] == [1.0, 2.0, 3.0]
    assert buffer[3].point[0] == 6.0

    pool.sort(2, len(buffer), axis=1)
    assert [item.point[1] for item in buffer] == sorted(item.point[1] for item in buffer)
