"""Distance strategies and the named-metric registry.

A metric is any callable ``metric(p, q) -> float`` over two points given as
tuples of coordinates. It must be symmetric, non-negative and deterministic;
these properties are trusted, not checked.

The recursive search prunes candidates by looking at one coordinate at a
time, which is only exact when ``metric(p, q) >= |p[k] - q[k]|`` for every
coordinate ``k``. Built-in metrics advertise this through
``coordinate_bounded``; callables without the attribute are assumed to
satisfy it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, ClassVar, Sequence, Union

import jax.numpy as jnp
from jaxtyping import Array

Metric = Callable[[Sequence[float], Sequence[float]], float]
MetricLike = Union[str, Metric]


def _deltas(rows: Array, points: Array) -> Array:
    """Return coordinate differences with shape ``(n_rows, n_points, dim)``."""

    return rows[:, None, :] - points[None, :, :]


@dataclass(frozen=True)
class Euclidean:
    """Straight-line (L2) distance."""

    coordinate_bounded: ClassVar[bool] = True

    def __call__(self, a: Sequence[float], b: Sequence[float]) -> float:
        return math.dist(a, b)

    def pairwise_block(self, rows: Array, points: Array) -> Array:
        deltas = _deltas(rows, points)
        return jnp.sqrt(jnp.sum(deltas * deltas, axis=-1))


@dataclass(frozen=True)
class SqEuclidean:
    """Squared L2 distance.

    Not coordinate-bounded: two points closer than one unit can have a squared
    distance smaller than their gap along a single axis.
    """

    coordinate_bounded: ClassVar[bool] = False

    def __call__(self, a: Sequence[float], b: Sequence[float]) -> float:
        return sum((x - y) * (x - y) for x, y in zip(a, b))

    def pairwise_block(self, rows: Array, points: Array) -> Array:
        deltas = _deltas(rows, points)
        return jnp.sum(deltas * deltas, axis=-1)


@dataclass(frozen=True)
class Cityblock:
    """Manhattan (L1) distance."""

    coordinate_bounded: ClassVar[bool] = True

    def __call__(self, a: Sequence[float], b: Sequence[float]) -> float:
        return sum(abs(x - y) for x, y in zip(a, b))

    def pairwise_block(self, rows: Array, points: Array) -> Array:
        return jnp.sum(jnp.abs(_deltas(rows, points)), axis=-1)


@dataclass(frozen=True)
class Chebyshev:
    """Maximum coordinate difference (L-infinity)."""

    coordinate_bounded: ClassVar[bool] = True

    def __call__(self, a: Sequence[float], b: Sequence[float]) -> float:
        return max(abs(x - y) for x, y in zip(a, b))

    def pairwise_block(self, rows: Array, points: Array) -> Array:
        return jnp.max(jnp.abs(_deltas(rows, points)), axis=-1)


@dataclass(frozen=True)
class Minkowski:
    """Lp distance for ``p >= 1`` (``p = inf`` gives Chebyshev)."""

    p: float
    coordinate_bounded: ClassVar[bool] = True

    def __post_init__(self) -> None:
        if not self.p >= 1.0:
            raise ValueError(f"Minkowski order p must be >= 1, received {self.p}")

    def __call__(self, a: Sequence[float], b: Sequence[float]) -> float:
        if math.isinf(self.p):
            return max(abs(x - y) for x, y in zip(a, b))
        total = sum(abs(x - y) ** self.p for x, y in zip(a, b))
        return total ** (1.0 / self.p)

    def pairwise_block(self, rows: Array, points: Array) -> Array:
        gaps = jnp.abs(_deltas(rows, points))
        if math.isinf(self.p):
            return jnp.max(gaps, axis=-1)
        return jnp.sum(gaps**self.p, axis=-1) ** (1.0 / self.p)


_METRICS: dict[str, Metric] = {
    "euclidean": Euclidean(),
    "sqeuclidean": SqEuclidean(),
    "cityblock": Cityblock(),
    "manhattan": Cityblock(),
    "chebyshev": Chebyshev(),
}


def available_metrics() -> tuple[str, ...]:
    """Return registered metric names."""

    return tuple(sorted(_METRICS.keys()))


def register_metric(name: str, metric: Metric, *, overwrite: bool = False) -> None:
    """Register ``metric`` under ``name`` for lookup by string."""

    normalized = name.strip().lower()
    if not normalized:
        raise ValueError("metric name must be a non-empty string")
    if not callable(metric):
        raise ValueError(f"metric '{normalized}' must be callable")
    if (normalized in _METRICS) and (not overwrite):
        raise ValueError(
            f"metric '{normalized}' is already registered; "
            "pass overwrite=True to replace it"
        )
    _METRICS[normalized] = metric


def resolve_metric(metric: MetricLike) -> Metric:
    """Return the callable for a metric name, or ``metric`` itself."""

    if isinstance(metric, str):
        normalized = metric.strip().lower()
        try:
            return _METRICS[normalized]
        except KeyError:
            raise ValueError(
                f"unknown metric '{metric}'; available: {', '.join(available_metrics())}"
            ) from None
    if not callable(metric):
        raise ValueError(f"metric must be a name or a callable, received {metric!r}")
    return metric


def is_coordinate_bounded(metric: Metric) -> bool:
    """Return whether single-coordinate gaps never exceed ``metric``."""

    return bool(getattr(metric, "coordinate_bounded", True))


__all__ = [
    "Chebyshev",
    "Cityblock",
    "Euclidean",
    "Metric",
    "MetricLike",
    "Minkowski",
    "SqEuclidean",
    "available_metrics",
    "is_coordinate_bounded",
    "register_metric",
    "resolve_metric",
]
