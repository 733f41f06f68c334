"""Command-line interface for spiralode."""

import logging
from pathlib import Path

import click

from . import __version__
from .config import (
    AdamPhase,
    ExperimentConfig,
    LBFGSPhase,
    ModelConfig,
    SpiralConfig,
    enable_x64,
)


def _spiral_options(func):
    func = click.option('--seed', type=int, default=0, show_default=True, help='Seed for the data noise')(func)
    func = click.option('--num-samples', type=int, default=60, show_default=True, help='Number of trajectory samples')(func)
    func = click.option('--t-final', type=float, default=4.0, show_default=True, help='Final sample time')(func)
    func = click.option('--noise', type=float, default=0.1, show_default=True, help='Upper bound of the uniform noise')(func)
    return func


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def main(verbose):
    """spiralode - fit a neural ODE to a noisy 2D spiral."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


@main.command()
@_spiral_options
@click.option('--output', '-o', type=click.Path(dir_okay=False), required=True, help='Output .npz path')
def generate_data(noise, t_final, num_samples, seed, output):
    """Generate the noisy spiral and save it as ts/states arrays."""
    from .data import build_spiral_dataset
    from .io import save_npz_bundle

    try:
        config = SpiralConfig(noise=noise, t_final=t_final, num_samples=num_samples, seed=seed)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    trajectory = build_spiral_dataset(config)
    path = save_npz_bundle(output, ts=trajectory.ts, states=trajectory.states)
    click.echo(f"Saved {trajectory.num_samples} samples to {path}")


@main.command()
@_spiral_options
@click.option('--hidden-size', type=int, default=20, show_default=True, help='Hidden layer width')
@click.option('--model-seed', type=int, default=1, show_default=True, help='Seed for the network initialisation')
@click.option('--adam-iters', type=int, default=600, show_default=True, help='ADAM iterations')
@click.option('--learning-rate', type=float, default=0.05, show_default=True, help='ADAM learning rate')
@click.option('--lbfgs-iters', type=int, default=1000, show_default=True, help='Maximum LBFGS iterations')
@click.option('--plot/--no-plot', default=True, show_default=True, help='Draw the fit every --plot-every iterations')
@click.option('--plot-every', type=int, default=3, show_default=True, help='Callback cadence in iterations')
@click.option('--x64/--no-x64', default=True, show_default=True, help='Use double precision')
@click.option('--output', '-o', type=click.Path(file_okay=False), default='out', show_default=True, help='Output directory')
def train(
    noise,
    t_final,
    num_samples,
    seed,
    hidden_size,
    model_seed,
    adam_iters,
    learning_rate,
    lbfgs_iters,
    plot,
    plot_every,
    x64,
    output,
):
    """Train the neural ODE with ADAM followed by LBFGS."""
    if x64:
        enable_x64()

    from .io import save_model, save_npz_bundle
    from .metrics import rmse
    from .pipeline import fit_spiral
    from .plotting import plot_loss, plot_spiral_fit, plot_states_over_time, save_figure

    try:
        config = ExperimentConfig(
            spiral=SpiralConfig(noise=noise, t_final=t_final, num_samples=num_samples, seed=seed),
            model=ModelConfig(hidden_size=hidden_size, seed=model_seed),
            adam=AdamPhase(learning_rate=learning_rate, max_iters=adam_iters),
            lbfgs=LBFGSPhase(max_iters=lbfgs_iters),
            callback_every=plot_every,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    out_dir = Path(output)
    frame_dir = out_dir / "frames" if plot else None
    result = fit_spiral(config, doplot=plot, frame_dir=frame_dir)

    save_npz_bundle(
        out_dir / "trajectory.npz",
        ts=result.trajectory.ts,
        states=result.trajectory.states,
        prediction=result.lbfgs.prediction.states,
        params=result.params,
    )
    save_model(out_dir / "model.eqx", result.model)
    save_figure(
        plot_loss(result.history, phase_boundaries=(len(result.adam.history),)),
        out_dir / "loss.png",
    )
    save_figure(
        plot_spiral_fit(result.trajectory.states, result.lbfgs.prediction.states),
        out_dir / "fit.png",
    )
    save_figure(
        plot_states_over_time(
            result.trajectory.ts,
            result.trajectory.states,
            result.lbfgs.prediction.states,
        ),
        out_dir / "states.png",
    )
    fit_rmse = float(rmse(result.lbfgs.prediction.states, result.trajectory.states))

    click.echo(f"ADAM loss:  {result.adam.loss:.6g} after {result.adam.iterations} iterations")
    click.echo(
        f"LBFGS loss: {result.lbfgs.loss:.6g} after {result.lbfgs.iterations} iterations "
        f"({result.lbfgs.stop_reason})"
    )
    click.echo(f"Final RMSE: {fit_rmse:.6g}")
    click.echo(f"Results written to {out_dir}")


if __name__ == '__main__':
    main()
