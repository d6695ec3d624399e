"""Public closest-pair search API."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Union

import jax.numpy as jnp
import numpy as np
from beartype import beartype
from jaxtyping import Array, jaxtyped

from ._dense_impl import closest_pair_dense
from ._search_impl import (
    BRUTEFORCE_THRESHOLD,
    MIN_BRUTEFORCE_THRESHOLD,
    SearchContext,
    bruteforce_range,
    closest_sorted,
    estimate_recursion_depth,
)
from .metrics import MetricLike, is_coordinate_bounded, resolve_metric
from .scratch import ScratchPool
from .types import ClosestPair, IndexedPoint, SearchStats

logger = logging.getLogger(__name__)

SearchBackend = Literal["recursive", "bruteforce", "dense"]
PointsLike = Union[Array, np.ndarray, Sequence]

_BACKENDS = ("recursive", "bruteforce", "dense")
# Frames reserved for callers above the recursive kernel.
_RECURSION_MARGIN = 200


@dataclass(frozen=True)
class SearchConfig:
    """Resolved options for ``find_closest``."""

    backend: str = "recursive"
    bruteforce_threshold: int = BRUTEFORCE_THRESHOLD
    block_size: int = 1024
    return_stats: bool = False


def log_search_stats(
    stats: SearchStats,
    *,
    level: int = logging.INFO,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log a search summary using the provided (or module) logger."""

    target_logger = logger or logging.getLogger(__name__)
    target_logger.log(
        level,
        (
            "Closest pair via %s: n=%d, dim=%d, evaluations=%d, "
            "max_depth=%d, scratch=%s"
        ),
        stats.backend,
        stats.num_points,
        stats.dimension,
        stats.distance_evaluations,
        stats.max_depth,
        stats.scratch_capacity,
    )


def _validate_config(cfg: SearchConfig) -> None:
    if cfg.backend not in _BACKENDS:
        raise ValueError("backend must be one of: 'recursive', 'bruteforce', 'dense'")
    if cfg.bruteforce_threshold < MIN_BRUTEFORCE_THRESHOLD:
        raise ValueError(
            f"bruteforce_threshold must be >= {MIN_BRUTEFORCE_THRESHOLD}, "
            f"received {cfg.bruteforce_threshold}"
        )
    if cfg.block_size < 1:
        raise ValueError(f"block_size must be >= 1, received {cfg.block_size}")


def _validate_points(points: PointsLike) -> Array:
    """Return points as an ``(n_points, dim)`` array.

    One-dimensional input of length ``n`` is read as ``n`` scalar points.
    """

    try:
        points_arr = jnp.asarray(points)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "points must form a rectangular (n_points, dim) array of numbers"
        ) from exc
    if points_arr.ndim == 1:
        points_arr = points_arr.reshape(-1, 1)
    if points_arr.ndim != 2:
        raise ValueError(
            "points must have shape (n_points, dim); "
            f"received ndim={points_arr.ndim}"
        )
    if points_arr.shape[0] >= 2 and points_arr.shape[1] < 1:
        raise ValueError("points must have dim >= 1")
    return points_arr


def _indexed_points(points_arr: Array) -> list[IndexedPoint]:
    rows = np.asarray(points_arr).tolist()
    return [IndexedPoint(i, tuple(row)) for i, row in enumerate(rows)]


@contextmanager
def _recursion_headroom(depth: int):
    """Temporarily raise the interpreter recursion limit to fit ``depth`` frames."""

    current = sys.getrecursionlimit()
    required = depth + _RECURSION_MARGIN
    if required <= current:
        yield
        return
    logger.info(
        "Raising recursion limit from %d to %d for closest-pair search",
        current,
        required,
    )
    sys.setrecursionlimit(required)
    try:
        yield
    finally:
        sys.setrecursionlimit(current)


def _search_recursive(
    ctx: SearchContext,
    indexed: list[IndexedPoint],
    dimension: int,
) -> ClosestPair:
    pool = ctx.pool
    size = pool.load(dimension, indexed)
    points = pool.buffer(dimension)
    if size <= ctx.threshold:
        return bruteforce_range(ctx, points, 0, size)
    pool.sort(dimension, size, dimension - 1)
    depth = estimate_recursion_depth(size, dimension, ctx.threshold)
    with _recursion_headroom(depth):
        return closest_sorted(ctx, points, 0, size, dimension)


@jaxtyped(typechecker=beartype)
def find_closest(
    points: PointsLike,
    metric: MetricLike = "euclidean",
    *,
    backend: SearchBackend = "recursive",
    bruteforce_threshold: int = BRUTEFORCE_THRESHOLD,
    block_size: int = 1024,
    return_stats: bool = False,
    config: Optional[SearchConfig] = None,
):
    """Find the closest pair of points and their distance.

    Args:
        points: Sequence of equal-length coordinate vectors, or an array with
            shape ``(n_points, dim)``. A flat sequence is read as 1-D points.
        metric: Registered metric name or a callable ``metric(p, q)``.
            Callables receive points as tuples of coordinates.
        backend: ``recursive`` runs the ``O(n log n)`` dimension-recursive
            divide-and-conquer; ``bruteforce`` checks every pair;
            ``dense`` checks every pair blockwise with JAX (built-in metrics
            only).
        bruteforce_threshold: Ranges at or below this size are solved
            exhaustively by the recursive backend. Must be ``>= 3``.
        block_size: Rows per distance block for the dense backend.
        return_stats: If ``True``, also return a ``SearchStats`` record.
        config: Optional ``SearchConfig`` overriding the keyword options.

    Returns:
        ``ClosestPair(distance, (low, high))`` with ``low < high`` indexing the
        input, or ``None`` when fewer than two points are given. With
        ``return_stats`` the result is ``(result, stats)``.
    """

    cfg = config or SearchConfig(
        backend=backend,
        bruteforce_threshold=bruteforce_threshold,
        block_size=block_size,
        return_stats=return_stats,
    )
    _validate_config(cfg)
    metric_fn = resolve_metric(metric)
    points_arr = _validate_points(points)
    num_points, dimension = (int(s) for s in points_arr.shape)

    if cfg.backend == "recursive" and not is_coordinate_bounded(metric_fn):
        raise ValueError(
            f"metric {metric_fn!r} is not coordinate-bounded and cannot be used "
            "with the recursive backend; use backend='bruteforce' or 'dense'"
        )
    if cfg.backend == "dense" and not hasattr(metric_fn, "pairwise_block"):
        raise ValueError(
            "backend='dense' requires a metric with a vectorized pairwise_block"
        )

    logger.debug(
        "Closest-pair search: n=%d, dim=%d, backend=%s",
        num_points,
        dimension,
        cfg.backend,
    )
    pool = ScratchPool(dimension) if cfg.backend == "recursive" and num_points >= 2 else None
    ctx = SearchContext(metric_fn, pool, cfg.bruteforce_threshold)

    result = None
    if num_points >= 2:
        indexed = _indexed_points(points_arr)
        if cfg.backend == "recursive":
            result = _search_recursive(ctx, indexed, dimension)
        elif cfg.backend == "dense":
            result = closest_pair_dense(ctx, points_arr, indexed, block_size=cfg.block_size)
        else:
            result = bruteforce_range(ctx, indexed, 0, num_points)
        logger.debug(
            "Closest pair %s at distance %r after %d evaluations",
            result.indices,
            result.distance,
            ctx.evaluations,
        )

    if not cfg.return_stats:
        return result
    stats = SearchStats(
        num_points=num_points,
        dimension=dimension,
        backend=cfg.backend,
        distance_evaluations=ctx.evaluations,
        max_depth=ctx.max_depth,
        scratch_capacity=pool.capacity if pool is not None else (),
    )
    return result, stats


@jaxtyped(typechecker=beartype)
def bruteforce(points: PointsLike, metric: MetricLike = "euclidean") -> ClosestPair:
    """Return the closest pair by checking every pair exactly once.

    Intended as a correctness oracle for ``find_closest``; on equal distances
    the first pair in ``(i, j)`` row-major order is kept.
    """

    points_arr = _validate_points(points)
    if points_arr.shape[0] < 2:
        raise ValueError(
            f"bruteforce requires at least two points, received {points_arr.shape[0]}"
        )
    ctx = SearchContext(resolve_metric(metric))
    return bruteforce_range(ctx, _indexed_points(points_arr), 0, int(points_arr.shape[0]))


__all__ = [
    "BRUTEFORCE_THRESHOLD",
    "SearchBackend",
    "SearchConfig",
    "bruteforce",
    "find_closest",
    "log_search_stats",
]
