from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeAlias

import equinox as eqx
import jax
import jax.numpy as jnp
import numpy as np
from diffrax import (
    RESULTS,
    AbstractAdjoint,
    BacksolveAdjoint,
    ODETerm,
    PIDController,
    RecursiveCheckpointAdjoint,
    SaveAt,
    Tsit5,
    diffeqsolve,
)
from jax import tree_util

from .config import SolverConfig
from .data import Trajectory

ScalarLike: TypeAlias = bool | int | float | jax.Array | np.ndarray
DynamicsFn = Callable[[jax.Array, jax.Array], jax.Array]


@tree_util.register_pytree_node_class
@dataclass(frozen=True)
class SolveResult:
    ts: jnp.ndarray
    states: jnp.ndarray
    successful: jnp.ndarray

    def __len__(self: "SolveResult") -> int:
        return int(self.states.shape[0])

    def tree_flatten(
        self: "SolveResult",
    ) -> tuple[tuple[jnp.ndarray, jnp.ndarray, jnp.ndarray], None]:
        return (self.ts, self.states, self.successful), None

    @classmethod
    def tree_unflatten(
        cls: type["SolveResult"],
        _aux_data: Any,
        children: tuple[jnp.ndarray, jnp.ndarray, jnp.ndarray],
    ) -> "SolveResult":
        ts, states, successful = children
        return cls(ts=ts, states=states, successful=successful)


def make_adjoint(name: str) -> AbstractAdjoint:
    if name == "recursive_checkpoint":
        return RecursiveCheckpointAdjoint()
    if name == "backsolve":
        return BacksolveAdjoint()
    raise ValueError(
        f"Unknown adjoint '{name}'. Expected 'recursive_checkpoint' or 'backsolve'."
    )


def differentiable_ode_solve(
    dynamics_fn: DynamicsFn,
    u0: jnp.ndarray,
    tspan: tuple[ScalarLike, ScalarLike],
    params: jnp.ndarray,
    saveat: jnp.ndarray,
    rtol: float = 1e-6,
    atol: float = 1e-6,
    *,
    dt0: float | None = None,
    max_steps: int = 4096,
    adjoint: AbstractAdjoint | None = None,
) -> SolveResult:
    """Integrate ``dy/dt = dynamics_fn(y, params)`` with adaptive Tsit5.

    The solve is differentiable in ``params`` through ``adjoint``. It never
    raises from traced code: failures such as an exhausted step budget are
    reported through ``SolveResult.successful``; unreached save points are
    filled with ``inf`` by diffrax.
    """

    def vf(_t: ScalarLike, y: jnp.ndarray, args: jnp.ndarray) -> jnp.ndarray:
        return dynamics_fn(y, args).astype(y.dtype)

    t0, t1 = tspan
    sol = diffeqsolve(
        ODETerm(vf),
        Tsit5(),
        t0=t0,
        t1=t1,
        dt0=dt0,
        y0=u0,
        args=params,
        saveat=SaveAt(ts=saveat),
        stepsize_controller=PIDController(rtol=rtol, atol=atol),
        adjoint=adjoint or RecursiveCheckpointAdjoint(),
        max_steps=max_steps,
        throw=False,
    )
    if sol.ts is None or sol.ys is None:
        raise RuntimeError("Solver returned no trajectory.")
    return SolveResult(
        ts=sol.ts,
        states=sol.ys,
        successful=sol.result == RESULTS.successful,
    )


def build_predict_fn(
    trajectory: Trajectory,
    restore: Callable[[jax.Array], Callable[[jax.Array], jax.Array]],
    config: SolverConfig | None = None,
) -> Callable[[jax.Array], SolveResult]:
    """Return ``predict(p)`` integrating the network from the first sample.

    The prediction is saved exactly at ``trajectory.ts``, so it has one state
    per data sample and starts at ``trajectory.initial_state``.
    """

    config = config or SolverConfig()
    adjoint = make_adjoint(config.adjoint)
    ts = trajectory.ts
    u0 = trajectory.initial_state
    tspan = trajectory.tspan

    def dynamics(state: jax.Array, params: jax.Array) -> jax.Array:
        return restore(params)(state)

    @eqx.filter_jit
    def predict(params: jax.Array) -> SolveResult:
        return differentiable_ode_solve(
            dynamics,
            u0,
            tspan,
            params,
            ts,
            config.rtol,
            config.atol,
            dt0=config.dt0,
            max_steps=config.max_steps,
            adjoint=adjoint,
        )

    return predict
