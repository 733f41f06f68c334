from __future__ import annotations

from pathlib import Path
from typing import Sequence, cast

import matplotlib.pyplot as plt
import numpy as np
import numpy.typing as npt
from matplotlib.axes import Axes
from matplotlib.figure import Figure, SubFigure


def _get_ax(ax: Axes | None = None) -> Axes:
    if ax is None:
        _, ax = plt.subplots()
    return ax


def plot_spiral_fit(
    data: npt.ArrayLike,
    prediction: npt.ArrayLike | None = None,
    ax: Axes | None = None,
    title: str | None = "Neural ODE Spiral Fit",
    labels: tuple[str, str] = ("data", "prediction"),
) -> Axes:
    """Overlay data and prediction as two scatter plots in the x-y plane."""

    ax = _get_ax(ax)
    data_np = np.asarray(data)
    if data_np.ndim != 2 or data_np.shape[1] != 2:
        raise ValueError("data must have shape (num_samples, 2).")
    ax.scatter(data_np[:, 0], data_np[:, 1], label=labels[0], color="C0")
    if prediction is not None:
        prediction_np = np.asarray(prediction)
        if prediction_np.shape != data_np.shape:
            raise ValueError("prediction must match the shape of data.")
        ax.scatter(
            prediction_np[:, 0],
            prediction_np[:, 1],
            label=labels[1],
            color="C1",
            marker="x",
        )
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    if title:
        ax.set_title(title)
    ax.legend()
    return ax


def plot_states_over_time(
    ts: Sequence[float] | npt.ArrayLike,
    data: npt.ArrayLike,
    prediction: npt.ArrayLike | None = None,
    labels: Sequence[str] = ("x", "y"),
    ax: Axes | None = None,
    title: str | None = "States over time",
) -> Axes:
    """Plot each coordinate of the data against time, with the prediction dashed."""

    ax = _get_ax(ax)
    ts_np = np.asarray(ts)
    data_np = np.asarray(data)
    if data_np.ndim != 2 or data_np.shape[0] != ts_np.shape[0]:
        raise ValueError("data must have shape (len(ts), state_dim).")
    pred_np = None if prediction is None else np.asarray(prediction)
    if pred_np is not None and pred_np.shape != data_np.shape:
        raise ValueError("prediction must match the shape of data.")
    for dim, label in enumerate(labels[: data_np.shape[1]]):
        color = f"C{dim}"
        ax.plot(ts_np, data_np[:, dim], "o", color=color, markersize=3, label=f"{label} data")
        if pred_np is not None:
            ax.plot(ts_np, pred_np[:, dim], "--", color=color, label=f"{label} prediction")
    ax.set_xlabel("t")
    ax.set_ylabel("state")
    if title:
        ax.set_title(title)
    ax.legend()
    return ax


def plot_loss(
    losses: Sequence[float],
    ax: Axes | None = None,
    title: str = "Training Loss",
    phase_boundaries: Sequence[int] = (),
    log_scale: bool = True,
) -> Axes:
    """Plot a loss history, marking where one optimizer phase hands over."""

    ax = _get_ax(ax)
    ax.plot(losses)
    for boundary in phase_boundaries:
        ax.axvline(boundary, color="grey", linestyle="--", alpha=0.6)
    if log_scale and len(losses) and min(losses) > 0.0:
        ax.set_yscale("log")
    ax.set_xlabel("Iteration")
    ax.set_ylabel("Loss")
    ax.set_title(title)
    return ax


def save_figure(
    ax: Axes | np.ndarray | Figure | SubFigure,
    path: str | Path,
    *,
    dpi: int = 150,
    bbox_inches: str = "tight",
    close: bool = True,
) -> None:
    """Persist matplotlib content regardless of axes layout."""

    fig_like: Figure | SubFigure
    if isinstance(ax, np.ndarray):
        first = ax.ravel()[0]
        fig_like = cast(Figure, first.figure)
    elif isinstance(ax, SubFigure):
        fig_like = ax
    elif isinstance(ax, Figure):
        fig_like = ax
    elif isinstance(ax, Axes):
        fig_like = cast(Figure, ax.figure)
    else:
        raise TypeError(f"Unsupported object type for save_figure: {type(ax)}")

    fig = fig_like.figure if isinstance(fig_like, SubFigure) else fig_like
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches=bbox_inches)
    if close:
        plt.close(fig)
