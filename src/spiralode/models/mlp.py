from __future__ import annotations

from typing import Callable

import equinox as eqx
import jax
import jax.numpy as jnp
import jax.random as jr
from jax.flatten_util import ravel_pytree

from ..config import ModelConfig


class SpiralDynamics(eqx.Module):
    """Right-hand side ``dy/dt = W2 tanh(W1 y + b1) + b2``."""

    layer1: eqx.nn.Linear
    layer2: eqx.nn.Linear

    def __init__(
        self,
        state_size: int = 2,
        hidden_size: int = 20,
        *,
        key: jax.Array,
    ):
        if state_size <= 0 or hidden_size <= 0:
            raise ValueError("state_size and hidden_size must be positive.")
        k1, k2 = jr.split(key)
        self.layer1 = eqx.nn.Linear(state_size, hidden_size, key=k1)
        self.layer2 = eqx.nn.Linear(hidden_size, state_size, key=k2)

    def __call__(self: "SpiralDynamics", state: jax.Array) -> jax.Array:
        hidden = jnp.tanh(self.layer1(state))
        return self.layer2(hidden)

    @classmethod
    def from_config(cls, config: ModelConfig) -> "SpiralDynamics":
        return cls(
            config.state_size,
            config.hidden_size,
            key=jr.PRNGKey(config.seed),
        )


def flatten_model(
    model: eqx.Module,
) -> tuple[jax.Array, Callable[[jax.Array], eqx.Module]]:
    """Split a model into a flat parameter vector and a function rebuilding it.

    Only inexact array leaves become parameters; everything else (activation
    functions, sizes) stays in the static half and is reattached by
    ``restore``.
    """

    params, static = eqx.partition(model, eqx.is_inexact_array)
    flat, unravel = ravel_pytree(params)

    def restore(vector: jax.Array) -> eqx.Module:
        return eqx.combine(unravel(vector), static)

    return flat, restore


def count_parameters(model: eqx.Module) -> int:
    params = eqx.filter(model, eqx.is_inexact_array)
    return sum(leaf.size for leaf in jax.tree_util.tree_leaves(params))
