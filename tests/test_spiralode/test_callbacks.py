from __future__ import annotations

import jax.numpy as jnp
import jax.random as jr

from spiralode.callbacks import SpiralPlotCallback
from spiralode.data import generate_spiral


def _trajectory():
    return generate_spiral(0.1, 4.0, 12, key=jr.PRNGKey(0))


def test_plot_callback_never_requests_stop_by_default():
    trajectory = _trajectory()
    callback = SpiralPlotCallback(trajectory)
    prediction = trajectory.states + 0.5
    assert callback(jnp.zeros(3), 1.25, prediction) is False
    assert callback(jnp.zeros(3), 0.75, prediction) is False
    assert callback.calls == 2
    assert callback.losses == [1.25, 0.75]
    assert len(callback.ax.collections) == 2
    callback.close()


def test_plot_callback_writes_numbered_frames(tmp_path):
    trajectory = _trajectory()
    frame_dir = tmp_path / "frames"
    callback = SpiralPlotCallback(trajectory, frame_dir=frame_dir)
    for loss in (3.0, 2.0, 1.0):
        callback(jnp.zeros(3), loss, trajectory.states)
    callback.close()
    frames = sorted(path.name for path in frame_dir.iterdir())
    assert frames == ["frame_0001.png", "frame_0002.png", "frame_0003.png"]


def test_plot_callback_stops_below_threshold():
    trajectory = _trajectory()
    callback = SpiralPlotCallback(trajectory, stop_below=0.5)
    assert callback(jnp.zeros(3), 0.6, trajectory.states) is False
    assert callback(jnp.zeros(3), 0.4, trajectory.states) is True
    callback.close()
