from typing import TypeAlias

import equinox as eqx
import jax.numpy as jnp
from jaxtyping import Float

FloatArray: TypeAlias = Float[jnp.ndarray, "..."]


@eqx.filter_jit
def sse(pred: FloatArray, target: FloatArray) -> jnp.ndarray:
    """Sum of squared errors over every sample and dimension."""

    return jnp.sum((pred - target) ** 2)


@eqx.filter_jit
def mse(pred: FloatArray, target: FloatArray) -> jnp.ndarray:
    return jnp.mean((pred - target) ** 2)


@eqx.filter_jit
def rmse(pred: FloatArray, target: FloatArray) -> jnp.ndarray:
    return jnp.sqrt(mse(pred, target))
