from __future__ import annotations

import jax
import jax.random as jr
import pytest

from spiralode.data import generate_spiral
from spiralode.losses import build_loss_fn
from spiralode.models import SpiralDynamics, flatten_model


def _loss_problem():
    trajectory = generate_spiral(0.1, 4.0, 60, key=jr.PRNGKey(0))
    params, restore = flatten_model(SpiralDynamics(2, 20, key=jr.PRNGKey(1)))
    return build_loss_fn(trajectory, restore), params


@pytest.mark.benchmark(group="loss")
def test_loss_evaluation_benchmark(benchmark):
    loss_fn, params = _loss_problem()

    def run():
        loss, _ = loss_fn(params)
        return jax.block_until_ready(loss)

    benchmark(run)


@pytest.mark.benchmark(group="loss")
def test_loss_gradient_benchmark(benchmark):
    loss_fn, params = _loss_problem()

    def run():
        _, grads = loss_fn.value_and_grad(params)
        return jax.block_until_ready(grads)

    benchmark(run)
