#!/usr/bin/env python3
"""Neural ODE fit of a noisy 2D spiral.

Run top to bottom, or cell by cell in an IDE with ``# %%`` support:
generate the data, build the network, train with ADAM, refine with LBFGS,
then plot the result.
"""

# %%
import logging
from pathlib import Path

import jax.random as jr
import matplotlib.pyplot as plt

from spiralode import (
    AdamPhase,
    LBFGSPhase,
    SolverConfig,
    SpiralDynamics,
    SpiralPlotCallback,
    build_loss_fn,
    enable_x64,
    flatten_model,
    generate_spiral,
    plot_loss,
    plot_spiral_fit,
    plot_states_over_time,
    rmse,
    save_figure,
    train,
)

enable_x64()
logging.basicConfig(level=logging.INFO)

OUT_DIR = Path(__file__).resolve().parents[1] / "out" / "spiral_neural_ode"

# %%
# Data: 60 noisy samples of ((1+t)cos t, (1+t)sin t) on [0, 4].
trajectory = generate_spiral(0.1, 4.0, 60, key=jr.PRNGKey(0))

# %%
# Model: Dense(2 -> 20, tanh) followed by Dense(20 -> 2).
model = SpiralDynamics(2, 20, key=jr.PRNGKey(1))
params, restore = flatten_model(model)
loss_fn = build_loss_fn(trajectory, restore, SolverConfig(rtol=1e-6, atol=1e-6))

initial_loss, initial_prediction = loss_fn(params)
print(f"Initial loss: {float(initial_loss):.4f}")

# %%
# Phase 1: ADAM, redrawing the fit every third iteration.
doplot = True
callback = SpiralPlotCallback(trajectory, show=doplot) if doplot else None
adam = train(loss_fn, params, AdamPhase(learning_rate=0.05, max_iters=600), callback=callback)
print(f"ADAM loss: {adam.loss:.4f}")

# %%
# Phase 2: LBFGS from ADAM's parameters.
lbfgs = train(
    loss_fn,
    adam.params,
    LBFGSPhase(allow_loss_increase=True),
    callback=callback,
)
print(f"LBFGS loss: {lbfgs.loss:.4f} ({lbfgs.stop_reason} after {lbfgs.iterations} iterations)")

# %%
# Results
fit_ax = plot_spiral_fit(trajectory.states, lbfgs.prediction.states)
save_figure(fit_ax, OUT_DIR / "fit.png")
states_ax = plot_states_over_time(trajectory.ts, trajectory.states, lbfgs.prediction.states)
save_figure(states_ax, OUT_DIR / "states.png")
print(f"RMSE: {float(rmse(lbfgs.prediction.states, trajectory.states)):.4f}")
loss_ax = plot_loss(
    [*adam.history, *lbfgs.history],
    phase_boundaries=(len(adam.history),),
)
save_figure(loss_ax, OUT_DIR / "loss.png")
if callback is not None:
    callback.close()
plt.close("all")
