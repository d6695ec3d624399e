"""closestpair: exact closest-pair search in any dimension under any metric."""

from jax import config as _jax_config

# Coordinates and vectorized distances keep double precision.
_jax_config.update("jax_enable_x64", True)

from .dtypes import DISTANCE_DTYPE
from .metrics import (
    Chebyshev,
    Cityblock,
    Euclidean,
    Minkowski,
    SqEuclidean,
    available_metrics,
    is_coordinate_bounded,
    register_metric,
    resolve_metric,
)
from .scratch import ScratchPool
from .search import (
    BRUTEFORCE_THRESHOLD,
    SearchConfig,
    bruteforce,
    find_closest,
    log_search_stats,
)
from .types import ClosestPair, IndexedPoint, SearchStats

__all__ = [
    "BRUTEFORCE_THRESHOLD",
    "Chebyshev",
    "Cityblock",
    "ClosestPair",
    "Euclidean",
    "DISTANCE_DTYPE",
    "IndexedPoint",
    "Minkowski",
    "ScratchPool",
    "SearchConfig",
    "SearchStats",
    "SqEuclidean",
    "available_metrics",
    "bruteforce",
    "find_closest",
    "is_coordinate_bounded",
    "log_search_stats",
    "register_metric",
    "resolve_metric",
]
