from __future__ import annotations

import logging
from pathlib import Path

import jax
import jax.numpy as jnp
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes

from .data import Trajectory
from .plotting import plot_spiral_fit

logger = logging.getLogger(__name__)


class SpiralPlotCallback:
    """Redraw data against the current prediction on one reusable figure.

    Drawing never touches the optimisation itself. Frames are written to
    ``frame_dir`` when given, and ``show=True`` flushes the figure to an
    interactive backend. The callback only asks training to stop when
    ``stop_below`` is set and the loss drops under it.
    """

    def __init__(
        self,
        trajectory: Trajectory,
        *,
        frame_dir: str | Path | None = None,
        show: bool = False,
        stop_below: float | None = None,
    ) -> None:
        self._data = np.asarray(trajectory.states)
        self._frame_dir = Path(frame_dir) if frame_dir is not None else None
        if self._frame_dir is not None:
            self._frame_dir.mkdir(parents=True, exist_ok=True)
        self._show = show
        self._stop_below = stop_below
        self._ax: Axes | None = None
        self.calls = 0
        self.losses: list[float] = []

    @property
    def ax(self) -> Axes:
        if self._ax is None:
            _, self._ax = plt.subplots(figsize=(6, 6))
        return self._ax

    def __call__(
        self, params: jax.Array, loss: float, prediction: jnp.ndarray
    ) -> bool:
        del params
        self.calls += 1
        self.losses.append(loss)
        logger.info("callback %d: loss=%.6g", self.calls, loss)

        ax = self.ax
        ax.clear()
        plot_spiral_fit(
            self._data,
            np.asarray(prediction),
            ax=ax,
            title=f"Loss {loss:.4g}",
        )
        if self._frame_dir is not None:
            ax.figure.savefig(self._frame_dir / f"frame_{self.calls:04d}.png")
        if self._show:
            plt.pause(0.001)
        return self._stop_below is not None and loss < self._stop_below

    def close(self) -> None:
        if self._ax is not None:
            plt.close(self._ax.figure)
            self._ax = None
