from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Literal, Sequence

import equinox as eqx
import jax
import jax.numpy as jnp
import optax
from tqdm import tqdm

from .config import AdamPhase, LBFGSPhase, OptimizerPhase
from .errors import IntegrationFailure, OptimizerDivergence
from .losses import LossFunction
from .solve import SolveResult

logger = logging.getLogger(__name__)

Callback = Callable[[jax.Array, float, jnp.ndarray], bool]
StopReason = Literal["max_iters", "callback", "gtol", "loss_increase"]
StepFn = Callable[
    [jax.Array, optax.OptState],
    tuple[jax.Array, optax.OptState, jnp.ndarray, SolveResult, jnp.ndarray],
]


@dataclass
class TrainingResult:
    """Outcome of one optimizer phase.

    ``loss`` and ``prediction`` are evaluated at ``params``; ``history`` holds
    the loss seen at the start of every iteration, before its update.
    """

    params: jax.Array
    loss: float
    prediction: SolveResult
    phase: str
    iterations: int = 0
    stop_reason: StopReason = "max_iters"
    history: list[float] = field(default_factory=list)


def build_optimizer(phase: OptimizerPhase) -> optax.GradientTransformation:
    if isinstance(phase, AdamPhase):
        return optax.adam(learning_rate=phase.learning_rate)
    if isinstance(phase, LBFGSPhase):
        return optax.lbfgs(
            memory_size=phase.memory_size,
            linesearch=optax.scale_by_zoom_linesearch(
                max_linesearch_steps=phase.max_linesearch_steps,
                initial_guess_strategy="one",
            ),
        )
    raise TypeError(f"Unsupported optimizer phase: {type(phase).__name__}")


def _make_step(
    loss_fn: LossFunction,
    optimizer: optax.GradientTransformation,
    *,
    uses_linesearch: bool,
) -> StepFn:
    @eqx.filter_jit
    def step(
        params: jax.Array,
        opt_state: optax.OptState,
    ) -> tuple[jax.Array, optax.OptState, jnp.ndarray, SolveResult, jnp.ndarray]:
        (loss, prediction), grads = loss_fn.value_and_grad(params)
        if uses_linesearch:
            updates, opt_state = optimizer.update(
                grads,
                opt_state,
                params,
                value=loss,
                grad=grads,
                value_fn=loss_fn.value,
            )
        else:
            updates, opt_state = optimizer.update(grads, opt_state, params)
        new_params = optax.apply_updates(params, updates)
        return new_params, opt_state, loss, prediction, jnp.linalg.norm(grads)

    return step


def check_evaluation(
    iteration: int | None, loss: float, prediction: SolveResult
) -> None:
    """Raise when a loss evaluation cannot be trusted."""

    if not bool(prediction.successful):
        raise IntegrationFailure(iteration)
    if not math.isfinite(loss):
        raise OptimizerDivergence(iteration, loss)


def train(
    loss_fn: LossFunction,
    params: jax.Array,
    phase: OptimizerPhase,
    *,
    callback: Callback | None = None,
    callback_every: int = 3,
    progress: bool = True,
    optimizer: optax.GradientTransformation | None = None,
) -> TrainingResult:
    """Run a single optimizer phase starting from ``params``.

    ``callback(params, loss, prediction)`` runs after every
    ``callback_every``-th update and receives the parameters the loss was
    evaluated at; returning ``True`` ends the phase.

    ``optimizer`` replaces the transformation built from ``phase``. The
    phase still supplies ``max_iters`` and, for :class:`LBFGSPhase`, the
    ``gtol`` and loss-increase stop rules.
    """

    if callback_every <= 0:
        raise ValueError("callback_every must be positive.")

    uses_linesearch = optimizer is None and isinstance(phase, LBFGSPhase)
    if optimizer is None:
        optimizer = build_optimizer(phase)
    step = _make_step(loss_fn, optimizer, uses_linesearch=uses_linesearch)
    opt_state = optimizer.init(params)

    history: list[float] = []
    stop_reason: StopReason = "max_iters"
    iterations = 0
    last_evaluated = params
    logger.info("Starting %s phase for up to %d iterations", phase.name, phase.max_iters)

    iterator = tqdm(
        range(phase.max_iters),
        desc=f"{phase.name} training",
        disable=not progress,
    )
    for iteration in iterator:
        evaluated = params
        params, opt_state, loss, prediction, grad_norm = step(evaluated, opt_state)
        loss_value = float(loss)
        check_evaluation(iteration, loss_value, prediction)
        previous = history[-1] if history else None
        history.append(loss_value)
        iterations += 1
        iterator.set_postfix(loss=f"{loss_value:.6g}")

        if callback is not None and iterations % callback_every == 0:
            if callback(evaluated, loss_value, prediction.states):
                stop_reason = "callback"
                break

        if isinstance(phase, LBFGSPhase):
            if float(grad_norm) < phase.gtol:
                params = evaluated
                stop_reason = "gtol"
                break
            if (
                not phase.allow_loss_increase
                and previous is not None
                and loss_value > previous
            ):
                params = last_evaluated
                stop_reason = "loss_increase"
                break
        last_evaluated = evaluated

    final_loss, final_prediction = loss_fn(params)
    final_value = float(final_loss)
    check_evaluation(None, final_value, final_prediction)
    logger.info(
        "Finished %s phase after %d iterations (%s), loss=%.6g",
        phase.name,
        iterations,
        stop_reason,
        final_value,
    )
    return TrainingResult(
        params=params,
        loss=final_value,
        prediction=final_prediction,
        phase=phase.name,
        iterations=iterations,
        stop_reason=stop_reason,
        history=history,
    )


def train_phases(
    loss_fn: LossFunction,
    params: jax.Array,
    phases: Sequence[OptimizerPhase],
    *,
    callback: Callback | None = None,
    callback_every: int = 3,
    progress: bool = True,
) -> list[TrainingResult]:
    """Chain phases, each starting from the previous phase's final parameters."""

    results: list[TrainingResult] = []
    for phase in phases:
        result = train(
            loss_fn,
            params,
            phase,
            callback=callback,
            callback_every=callback_every,
            progress=progress,
        )
        results.append(result)
        params = result.params
    return results
