"""Lightweight result and bookkeeping containers for closest-pair search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple


class IndexedPoint(NamedTuple):
    """A point tagged with its position in the caller's input."""

    index: int
    point: tuple


class ClosestPair(NamedTuple):
    """Minimum distance and the original positions ``(low, high)`` of the pair.

    Compares equal to the plain tuple ``(distance, (low, high))``.
    """

    distance: float
    indices: tuple[int, int]


@dataclass(frozen=True)
class SearchStats:
    """Diagnostics collected during a single ``find_closest`` call.

    Attributes:
        num_points: Number of input points.
        dimension: Coordinate count of each point (``0`` for empty input).
        backend: Backend that produced the result.
        distance_evaluations: Number of scalar metric evaluations.
        max_depth: Deepest recursion level reached by the recursive engine.
        scratch_capacity: Allocated buffer length per dimension level,
            level 1 first. Empty for backends without a scratch pool.
    """

    num_points: int
    dimension: int
    backend: str
    distance_evaluations: int
    max_depth: int
    scratch_capacity: tuple[int, ...]


__all__ = ["ClosestPair", "IndexedPoint", "SearchStats"]
