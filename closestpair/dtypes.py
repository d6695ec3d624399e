"""Local dtype policy for closestpair arrays."""

import jax.numpy as jnp

# Vectorized distance blocks are always evaluated in double precision, even
# for float32 input, so near-equal pairs are not merged by rounding.
DISTANCE_DTYPE = jnp.float64


def as_distance_array(x):
    """Convert coordinates to the closestpair distance dtype."""
    return jnp.asarray(x, dtype=DISTANCE_DTYPE)


__all__ = ["DISTANCE_DTYPE", "as_distance_array"]
