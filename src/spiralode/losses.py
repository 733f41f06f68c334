from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import equinox as eqx
import jax
import jax.numpy as jnp

from .config import SolverConfig
from .data import Trajectory
from .metrics import sse
from .solve import SolveResult, build_predict_fn

LossOutput = tuple[jnp.ndarray, SolveResult]


@dataclass(frozen=True)
class LossFunction:
    """Callable loss wrapper exposing reusable value-and-grad computations.

    ``loss(p)`` returns ``(loss, prediction)``; ``value(p)`` drops the
    prediction for optimizers that need a scalar objective.
    """

    fn: Callable[[jax.Array], LossOutput]
    value_and_grad_fn: Callable[[jax.Array], tuple[LossOutput, jax.Array]]
    predict: Callable[[jax.Array], SolveResult]

    def __call__(self, params: jax.Array) -> LossOutput:
        return self.fn(params)

    def value(self, params: jax.Array) -> jnp.ndarray:
        loss, _ = self.fn(params)
        return loss

    def value_and_grad(self, params: jax.Array) -> tuple[LossOutput, jax.Array]:
        return self.value_and_grad_fn(params)


def build_loss_fn(
    trajectory: Trajectory,
    restore: Callable[[jax.Array], Callable[[jax.Array], jax.Array]],
    solver_config: SolverConfig | None = None,
) -> LossFunction:
    """Sum-of-squares loss between the trajectory and the neural ODE prediction."""

    predict = build_predict_fn(trajectory, restore, solver_config)
    target = trajectory.states

    def loss_fn(params: jax.Array) -> LossOutput:
        prediction = predict(params)
        return sse(prediction.states, target), prediction

    jitted_loss = eqx.filter_jit(loss_fn)
    loss_and_grad = eqx.filter_value_and_grad(jitted_loss, has_aux=True)
    return LossFunction(jitted_loss, loss_and_grad, predict)
