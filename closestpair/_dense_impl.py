"""Exhaustive closest-pair search vectorized with JAX over row blocks."""

from __future__ import annotations

from typing import Sequence

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array

from ._search_impl import SearchContext
from .dtypes import as_distance_array
from .types import ClosestPair, IndexedPoint

# Block distances within this relative gap of a block minimum are re-scored
# with the scalar metric before a winner is chosen.
_RESCORE_RTOL = 1e-12


def _cutoff(value: float) -> float:
    return value + abs(value) * _RESCORE_RTOL


def _masked_block(metric, rows: Array, points: Array, start: int) -> Array:
    """Distances of a row block to all points, keeping only ``col > row``."""

    block = metric.pairwise_block(rows, points)
    row_ids = jnp.arange(start, start + rows.shape[0])
    col_ids = jnp.arange(points.shape[0])
    return jnp.where(col_ids[None, :] > row_ids[:, None], block, jnp.inf)


def closest_pair_dense(
    ctx: SearchContext,
    points: Array,
    indexed: Sequence[IndexedPoint],
    *,
    block_size: int,
) -> ClosestPair:
    """Return the closest pair by blockwise exhaustive search.

    Blocks only nominate candidates: every pair within a few ulps of its
    block minimum is evaluated with the scalar metric, in the row-major order
    of the bruteforce scan, and the first strict minimum is kept. Only
    ``block_size * n`` distances are materialized at a time.
    """

    points_arr = as_distance_array(points)
    num_points = int(points_arr.shape[0])
    if num_points < 2:
        raise ValueError("dense search requires at least two points")

    best = None
    # The last row has no partner with a larger index.
    for start in range(0, num_points - 1, block_size):
        stop = min(start + block_size, num_points - 1)
        block = np.asarray(_masked_block(ctx.metric, points_arr[start:stop], points_arr, start))
        floor = float(block.min())
        if best is not None and floor > _cutoff(best.distance):
            continue
        rows, cols = np.nonzero(block <= _cutoff(floor))
        for r, c in zip(rows.tolist(), cols.tolist()):
            candidate = ctx.pair(indexed[start + r], indexed[c])
            if best is None or candidate.distance < best.distance:
                best = candidate
    return best


__all__ = ["closest_pair_dense"]
