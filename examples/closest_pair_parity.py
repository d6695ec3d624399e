"""Parity and timing check across closest-pair backends.

Run from the repository root:
    python examples/closest_pair_parity.py --n-points 2000 --dim 3
"""

from __future__ import annotations

import argparse
import logging
import time

import jax

from closestpair import find_closest, log_search_stats


def _make_points(n: int, dim: int, seed: int) -> jax.Array:
    key = jax.random.PRNGKey(seed)
    return jax.random.uniform(key, (n, dim), minval=0.0, maxval=1.0)


def _run_backend(points: jax.Array, metric: str, backend: str) -> dict[str, object]:
    started = time.perf_counter()
    result, stats = find_closest(points, metric, backend=backend, return_stats=True)
    elapsed = time.perf_counter() - started
    log_search_stats(stats)
    return {
        "distance": result.distance,
        "indices": result.indices,
        "evaluations": stats.distance_evaluations,
        "seconds": round(elapsed, 4),
    }


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--n-points", type=int, default=2_000)
    parser.add_argument("--dim", type=int, default=3)
    parser.add_argument("--metric", default="euclidean")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument(
        "--backends",
        nargs="+",
        default=["recursive", "dense", "bruteforce"],
        choices=["recursive", "dense", "bruteforce"],
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print("jax:", jax.__version__)
    print("config:", vars(args))

    points = _make_points(args.n_points, args.dim, args.seed)
    reports = {}
    for backend in args.backends:
        reports[backend] = _run_backend(points, args.metric, backend)
        print(f"[{backend}]", reports[backend])

    distances = {report["distance"] for report in reports.values()}
    print("parity:", "ok" if len(distances) == 1 else f"MISMATCH {sorted(distances)}")


if __name__ == "__main__":
    main()
