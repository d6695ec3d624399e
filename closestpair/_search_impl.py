"""
Dimension-recursive divide-and-conquer kernels for closest-pair search.

Every kernel works on a half-open range ``[start, stop)`` of a working
buffer so that spatial halves never need to be copied. A call at level ``d``
expects its range sorted by coordinate ``d - 1``. After solving both halves it
copies the boundary strip into the scratch buffer of level ``d - 1``, sorts
that by coordinate ``d - 2`` and solves the strip one level down, until a
single coordinate remains and a linear scan finishes the merge.
"""

from __future__ import annotations

import math
from bisect import bisect_left, bisect_right
from typing import Sequence

from .metrics import Metric
from .scratch import ScratchPool, coordinate_key
from .types import ClosestPair, IndexedPoint

# Ranges at or below this length are solved exhaustively.
BRUTEFORCE_THRESHOLD = 33
# Smallest threshold that keeps both spatial halves at two points or more.
MIN_BRUTEFORCE_THRESHOLD = 3


class SearchContext:
    """Per-invocation state shared by the recursive kernels."""

    __slots__ = ("metric", "pool", "threshold", "evaluations", "max_depth")

    def __init__(
        self,
        metric: Metric,
        pool: ScratchPool | None = None,
        threshold: int = BRUTEFORCE_THRESHOLD,
    ) -> None:
        self.metric = metric
        self.pool = pool
        self.threshold = threshold
        self.evaluations = 0
        self.max_depth = 0

    def pair(self, a: IndexedPoint, b: IndexedPoint) -> ClosestPair:
        """Evaluate two points, always passing the lower original index first."""

        self.evaluations += 1
        if a.index < b.index:
            return ClosestPair(self.metric(a.point, b.point), (a.index, b.index))
        return ClosestPair(self.metric(b.point, a.point), (b.index, a.index))


def closer(best: ClosestPair, candidate: ClosestPair) -> ClosestPair:
    """Return ``candidate`` only when it is strictly closer than ``best``."""

    return candidate if candidate.distance < best.distance else best


def bruteforce_range(
    ctx: SearchContext,
    buffer: Sequence[IndexedPoint],
    start: int,
    stop: int,
) -> ClosestPair:
    """Scan every pair of ``buffer[start:stop]`` in row-major order."""

    best = None
    for i in range(start, stop - 1):
        a = buffer[i]
        for j in range(i + 1, stop):
            candidate = ctx.pair(a, buffer[j])
            if best is None or candidate.distance < best.distance:
                best = candidate
    return best


def merge_strip_1d(
    ctx: SearchContext,
    buffer: Sequence[IndexedPoint],
    start: int,
    stop: int,
    best: ClosestPair,
) -> ClosestPair:
    """Improve ``best`` over a range sorted by its only remaining coordinate.

    Each point is compared with successors until their gap along coordinate
    0 reaches the current best distance.
    """

    for i in range(start, stop - 1):
        a = buffer[i]
        x = a.point[0]
        j = i + 1
        while j < stop and buffer[j].point[0] - x < best.distance:
            best = closer(best, ctx.pair(a, buffer[j]))
            j += 1
    return best


def strip_range(
    buffer: Sequence[IndexedPoint],
    start: int,
    mid: int,
    stop: int,
    axis: int,
    delta: float,
) -> tuple[int, int]:
    """Return the sub-range within ``delta`` of the split along ``axis``.

    The split center is the midpoint between the last point of the left half
    ``[start, mid)`` and the first point of the right half ``[mid, stop)``.
    """

    key = coordinate_key(axis)
    center = (key(buffer[mid - 1]) + key(buffer[mid])) / 2
    lo = bisect_left(buffer, center - delta, start, mid, key=key)
    hi = bisect_right(buffer, center + delta, mid, stop, key=key)
    return lo, hi


def closest_sorted(
    ctx: SearchContext,
    buffer: Sequence[IndexedPoint],
    start: int,
    stop: int,
    level: int,
    depth: int = 1,
) -> ClosestPair:
    """Solve ``buffer[start:stop]``, sorted by coordinate ``level - 1``."""

    ctx.max_depth = max(ctx.max_depth, depth)
    length = stop - start
    if length <= ctx.threshold:
        return bruteforce_range(ctx, buffer, start, stop)
    if level == 1:
        seed = ctx.pair(buffer[start], buffer[stop - 1])
        return merge_strip_1d(ctx, buffer, start, stop, seed)

    mid = start + length // 2
    left = closest_sorted(ctx, buffer, start, mid, level, depth + 1)
    right = closest_sorted(ctx, buffer, mid, stop, level, depth + 1)
    best = closer(left, right)

    lo, hi = strip_range(buffer, start, mid, stop, level - 1, best.distance)
    if hi - lo < 2:
        return best

    pool = ctx.pool
    size = pool.load(level - 1, buffer, lo, hi)
    pool.sort(level - 1, size, level - 2)
    strip = pool.buffer(level - 1)
    if level - 1 == 1:
        return merge_strip_1d(ctx, strip, 0, size, best)
    return closer(best, closest_sorted(ctx, strip, 0, size, level - 1, depth + 1))


def estimate_recursion_depth(num_points: int, dimension: int, threshold: int) -> int:
    """Upper estimate of nested ``closest_sorted`` frames for a search."""

    if num_points <= threshold:
        return 1
    spatial = math.ceil(math.log2(num_points / threshold)) + 1
    return dimension * spatial + 1


__all__ = [
    "BRUTEFORCE_THRESHOLD",
    "MIN_BRUTEFORCE_THRESHOLD",
    "SearchContext",
    "bruteforce_range",
    "closer",
    "closest_sorted",
    "estimate_recursion_depth",
    "merge_strip_1d",
    "strip_range",
]
