"""Tests for the recursive search kernels and recursion guard."""

import math
import sys

import numpy as np

from closestpair import Cityblock, Euclidean, IndexedPoint, ScratchPool, bruteforce
from closestpair._search_impl import (
    SearchContext,
    bruteforce_range,
    closer,
    closest_sorted,
    estimate_recursion_depth,
    merge_strip_1d,
    strip_range,
)
from closestpair.search import _RECURSION_MARGIN, _recursion_headroom
from closestpair.types import ClosestPair


def _line(coords):
    return [IndexedPoint(i, (float(x),)) for i, x in enumerate(coords)]


def test_context_pair_orders_indices_and_counts_evaluations():
    calls = []

    def metric(a, b):
        calls.append((a, b))
        return abs(a[0] - b[0])

    ctx = SearchContext(metric)
    pair = ctx.pair(IndexedPoint(7, (1.0,)), IndexedPoint(2, (4.0,)))

    assert pair == (3.0, (2, 7))
    assert calls == [((4.0,), (1.0,))]
    assert ctx.evaluations == 1


def test_closer_keeps_best_on_ties():
    best = ClosestPair(1.0, (0, 1))
    assert closer(best, ClosestPair(1.0, (2, 3))) is best
    assert closer(best, ClosestPair(0.5, (2, 3))) == (0.5, (2, 3))


def test_bruteforce_range_respects_bounds_and_first_minimum():
    points = _line([0.0, 10.0, 11.0, 12.0, 12.5])
    ctx = SearchContext(Euclidean())

    assert bruteforce_range(ctx, points, 1, 4) == (1.0, (1, 2))
    assert bruteforce_range(ctx, points, 0, 5) == (0.5, (3, 4))
    assert ctx.evaluations == 3 + 10


def test_merge_strip_1d_improves_seed():
    points = _line([0.0, 1.0, 3.0, 3.25, 7.0])
    ctx = SearchContext(Euclidean())
    seed = ctx.pair(points[0], points[-1])

    assert merge_strip_1d(ctx, points, 0, 5, seed) == (0.25, (2, 3))


def test_merge_strip_1d_returns_seed_when_nothing_is_closer():
    points = _line([0.0, 5.0, 10.0])
    ctx = SearchContext(Euclidean())
    seed = ClosestPair(1.0, (8, 9))

    assert merge_strip_1d(ctx, points, 0, 3, seed) is seed
    assert ctx.evaluations == 0


def test_strip_range_selects_points_near_split():
    points = _line([0, 1, 2, 3, 4, 5, 6, 7])
    # center = 3.5, so the strip spans [2.0, 5.0].
    assert strip_range(points, 0, 4, 8, axis=0, delta=1.5) == (2, 6)
    assert strip_range(points, 0, 4, 8, axis=0, delta=0.25) == (4, 4)
    assert strip_range(points, 0, 4, 8, axis=0, delta=100.0) == (0, 8)


def test_closest_sorted_uses_scratch_levels_below_the_active_one():
    rng = np.random.default_rng(21)
    coords = rng.random((120, 3))
    pool = ScratchPool(3)
    indexed = [IndexedPoint(i, tuple(row)) for i, row in enumerate(coords.tolist())]
    size = pool.load(3, indexed)
    pool.sort(3, size, 2)
    ctx = SearchContext(Cityblock(), pool, threshold=3)

    result = closest_sorted(ctx, pool.buffer(3), 0, size, 3)

    assert result == bruteforce(coords, "cityblock")
    assert pool.capacity[2] == 120
    assert 0 < pool.capacity[1] <= 120
    assert ctx.max_depth > 1


def test_estimate_recursion_depth_grows_with_dimension():
    assert estimate_recursion_depth(10, 3, 33) == 1
    assert estimate_recursion_depth(1024, 2, 32) == 2 * (math.ceil(math.log2(32)) + 1) + 1
    assert estimate_recursion_depth(10**6, 20, 33) > estimate_recursion_depth(10**6, 2, 33)


def test_recursion_headroom_raises_and_restores_limit():
    limit = sys.getrecursionlimit()
    with _recursion_headroom(limit):
        assert sys.getrecursionlimit() == limit + _RECURSION_MARGIN
    assert sys.getrecursionlimit() == limit

    with _recursion_headroom(1):
        assert sys.getrecursionlimit() == limit
