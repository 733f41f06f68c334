from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

import jax
import jax.numpy as jnp
import jax.random as jr

from .config import SpiralConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Trajectory:
    """Time-ordered samples ``(t_i, x_i, y_i)`` of a 2D trajectory."""

    ts: jnp.ndarray
    states: jnp.ndarray

    def __post_init__(self: "Trajectory") -> None:
        ts = jnp.asarray(self.ts)
        states = jnp.asarray(self.states)
        if ts.ndim != 1 or ts.size < 2:
            raise ValueError("ts must be a 1D array with at least two samples.")
        if states.ndim != 2 or states.shape[0] != ts.shape[0]:
            raise ValueError("states must have shape (len(ts), state_dim).")
        if not bool(jnp.all(jnp.diff(ts) > 0)):
            raise ValueError("ts must be strictly increasing.")
        object.__setattr__(self, "ts", ts)
        object.__setattr__(self, "states", states)

    def __iter__(self: "Trajectory") -> Iterator[jnp.ndarray]:
        """Allow unpacking as (ts, states)."""

        return iter((self.ts, self.states))

    @property
    def num_samples(self: "Trajectory") -> int:
        return int(self.ts.shape[0])

    @property
    def initial_state(self: "Trajectory") -> jnp.ndarray:
        return self.states[0]

    @property
    def tspan(self: "Trajectory") -> tuple[jnp.ndarray, jnp.ndarray]:
        return self.ts[0], self.ts[-1]


def spiral_curve(ts: jnp.ndarray) -> jnp.ndarray:
    """Noise-free spiral ``((1+t)cos t, (1+t)sin t)`` stacked as (N, 2)."""

    radius = 1.0 + ts
    return jnp.stack([radius * jnp.cos(ts), radius * jnp.sin(ts)], axis=1)


def generate_spiral(
    noise: float,
    t_final: float,
    num_samples: int,
    *,
    key: jax.Array,
) -> Trajectory:
    """Sample the spiral on a uniform grid over ``[0, t_final]``.

    Each coordinate of each sample receives independent ``Uniform(0, noise)``
    noise, so the result is fully determined by ``key``.
    """

    if num_samples < 2:
        raise ValueError("num_samples must be at least 2.")
    if t_final <= 0.0:
        raise ValueError("t_final must be positive.")
    if noise < 0.0:
        raise ValueError("noise cannot be negative.")

    ts = jnp.linspace(0.0, t_final, num_samples)
    clean = spiral_curve(ts)
    perturbation = noise * jr.uniform(key, clean.shape, dtype=clean.dtype)
    return Trajectory(ts=ts, states=clean + perturbation)


def build_spiral_dataset(config: SpiralConfig) -> Trajectory:
    logger.debug(
        "Generating spiral: noise=%s t_final=%s num_samples=%d seed=%d",
        config.noise,
        config.t_final,
        config.num_samples,
        config.seed,
    )
    return generate_spiral(
        config.noise,
        config.t_final,
        config.num_samples,
        key=jr.PRNGKey(config.seed),
    )
