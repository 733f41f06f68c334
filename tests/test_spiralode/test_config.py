from __future__ import annotations

import pytest

from spiralode.config import (
    AdamPhase,
    ExperimentConfig,
    LBFGSPhase,
    ModelConfig,
    SolverConfig,
    SpiralConfig,
)


def test_defaults_reproduce_the_reference_setup():
    config = ExperimentConfig()
    assert config.spiral.num_samples == 60
    assert config.spiral.t_final == 4.0
    assert config.model.hidden_size == 20
    assert config.solver.rtol == config.solver.atol == 1e-6
    assert config.adam.learning_rate == 0.05
    assert config.adam.max_iters == 600
    assert config.lbfgs.allow_loss_increase is True
    assert config.callback_every == 3


def test_spiral_config_dt_spans_the_interval():
    config = SpiralConfig(t_final=4.0, num_samples=5)
    assert config.dt == pytest.approx(1.0)


@pytest.mark.parametrize(
    "factory",
    [
        lambda: SpiralConfig(noise=-1.0),
        lambda: SpiralConfig(t_final=0.0),
        lambda: SpiralConfig(num_samples=1),
        lambda: ModelConfig(hidden_size=0),
        lambda: SolverConfig(rtol=0.0),
        lambda: SolverConfig(max_steps=0),
        lambda: SolverConfig(dt0=-0.1),
        lambda: SolverConfig(adjoint="forward"),
        lambda: AdamPhase(learning_rate=0.0),
        lambda: AdamPhase(max_iters=-1),
        lambda: LBFGSPhase(memory_size=0),
        lambda: LBFGSPhase(gtol=-1.0),
        lambda: ExperimentConfig(callback_every=0),
    ],
)
def test_invalid_configuration_is_rejected(factory):
    with pytest.raises(ValueError):
        factory()


def test_phase_names():
    assert AdamPhase().name == "adam"
    assert LBFGSPhase().name == "lbfgs"
