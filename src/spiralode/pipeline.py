from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import equinox as eqx
import jax

from .callbacks import SpiralPlotCallback
from .config import ExperimentConfig
from .data import Trajectory, build_spiral_dataset
from .losses import LossFunction, build_loss_fn
from .models import SpiralDynamics, count_parameters, flatten_model
from .training import Callback, TrainingResult, train

logger = logging.getLogger(__name__)


@dataclass
class ExperimentResult:
    """Data, both optimizer phases and the trained network of one run."""

    trajectory: Trajectory
    adam: TrainingResult
    lbfgs: TrainingResult
    restore: Callable[[jax.Array], eqx.Module]

    @property
    def params(self) -> jax.Array:
        return self.lbfgs.params

    @property
    def model(self) -> eqx.Module:
        return self.restore(self.lbfgs.params)

    @property
    def history(self) -> list[float]:
        return [*self.adam.history, *self.lbfgs.history]


def fit_spiral(
    config: ExperimentConfig | None = None,
    *,
    doplot: bool = True,
    callback: Callback | None = None,
    frame_dir: str | Path | None = None,
    progress: bool = True,
) -> ExperimentResult:
    """Generate the spiral, then run the ADAM phase and the LBFGS refinement.

    With ``doplot`` the default :class:`SpiralPlotCallback` (or ``callback``
    when given) runs every ``config.callback_every`` iterations; without it
    no callback is invoked at all.
    """

    config = config or ExperimentConfig()
    trajectory = build_spiral_dataset(config.spiral)
    model = SpiralDynamics.from_config(config.model)
    params, restore = flatten_model(model)
    logger.info("Dynamics network has %d parameters", count_parameters(model))

    loss_fn: LossFunction = build_loss_fn(trajectory, restore, config.solver)

    plot_callback: SpiralPlotCallback | None = None
    active_callback: Callback | None = None
    if doplot:
        if callback is None:
            plot_callback = SpiralPlotCallback(trajectory, frame_dir=frame_dir)
            active_callback = plot_callback
        else:
            active_callback = callback

    try:
        adam = train(
            loss_fn,
            params,
            config.adam,
            callback=active_callback,
            callback_every=config.callback_every,
            progress=progress,
        )
        lbfgs = train(
            loss_fn,
            adam.params,
            config.lbfgs,
            callback=active_callback,
            callback_every=config.callback_every,
            progress=progress,
        )
    finally:
        if plot_callback is not None:
            plot_callback.close()

    return ExperimentResult(
        trajectory=trajectory,
        adam=adam,
        lbfgs=lbfgs,
        restore=restore,
    )
