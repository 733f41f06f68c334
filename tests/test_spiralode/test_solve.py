from __future__ import annotations

import chex
import jax
import jax.numpy as jnp
import jax.random as jr
import pytest

from spiralode.config import SolverConfig
from spiralode.data import generate_spiral
from spiralode.models import SpiralDynamics, flatten_model
from spiralode.solve import (
    build_predict_fn,
    differentiable_ode_solve,
    make_adjoint,
)


def _decay(y, rate):
    return rate * y


def test_differentiable_ode_solve_matches_exponential_decay():
    u0 = jnp.array([1.0, 2.0])
    ts = jnp.linspace(0.0, 1.0, 5)
    result = differentiable_ode_solve(_decay, u0, (0.0, 1.0), jnp.array(-0.5), ts)
    expected = u0[None, :] * jnp.exp(-0.5 * ts)[:, None]
    assert bool(result.successful)
    chex.assert_trees_all_close(result.ts, ts)
    chex.assert_trees_all_close(result.states, expected, rtol=1e-5, atol=1e-6)


@pytest.mark.parametrize("adjoint", ["recursive_checkpoint", "backsolve"])
def test_differentiable_ode_solve_gradient_matches_analytic(adjoint):
    u0 = jnp.array([1.0, 2.0])
    ts = jnp.linspace(0.0, 1.0, 3)

    def final_sum(rate):
        result = differentiable_ode_solve(
            _decay,
            u0,
            (0.0, 1.0),
            rate,
            ts,
            adjoint=make_adjoint(adjoint),
        )
        return jnp.sum(result.states[-1])

    rate = jnp.array(-0.3)
    grad = jax.grad(final_sum)(rate)
    expected = jnp.sum(u0) * jnp.exp(rate)
    chex.assert_trees_all_close(grad, expected, rtol=1e-4)


def test_differentiable_ode_solve_reports_exhausted_step_budget():
    u0 = jnp.array([1.0, 0.0])
    ts = jnp.linspace(0.0, 4.0, 60)
    result = differentiable_ode_solve(
        _decay, u0, (0.0, 4.0), jnp.array(-1.0), ts, max_steps=1
    )
    assert not bool(result.successful)


def test_make_adjoint_rejects_unknown_names():
    with pytest.raises(ValueError):
        make_adjoint("forward")


def _spiral_problem(num_samples=60):
    trajectory = generate_spiral(0.1, 4.0, num_samples, key=jr.PRNGKey(0))
    params, restore = flatten_model(SpiralDynamics(2, 20, key=jr.PRNGKey(1)))
    return trajectory, params, restore


def test_prediction_has_one_state_per_sample():
    trajectory, params, restore = _spiral_problem()
    predict = build_predict_fn(trajectory, restore)
    result = predict(params)
    assert bool(result.successful)
    assert len(result) == 60
    chex.assert_shape(result.states, (60, 2))
    chex.assert_trees_all_close(result.ts, trajectory.ts)


def test_prediction_starts_at_first_sample():
    trajectory, params, restore = _spiral_problem()
    predict = build_predict_fn(trajectory, restore)
    for scale in (0.0, 1.0, 3.0):
        states = predict(scale * params).states
        assert float(jnp.max(jnp.abs(states[0] - trajectory.initial_state))) < 1e-5


def test_prediction_is_differentiable_in_parameters():
    trajectory, params, restore = _spiral_problem(num_samples=20)
    predict = build_predict_fn(trajectory, restore, SolverConfig(adjoint="backsolve"))
    grads = jax.grad(lambda p: jnp.sum(predict(p).states ** 2))(params)
    chex.assert_shape(grads, params.shape)
    chex.assert_tree_all_finite(grads)
