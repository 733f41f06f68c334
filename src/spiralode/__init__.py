"""Neural ODE fit of a noisy 2D spiral."""

__version__ = "0.1.0"

from .callbacks import SpiralPlotCallback
from .config import (
    AdamPhase,
    ExperimentConfig,
    LBFGSPhase,
    ModelConfig,
    SolverConfig,
    SpiralConfig,
    enable_x64,
)
from .data import Trajectory, build_spiral_dataset, generate_spiral
from .errors import IntegrationFailure, OptimizerDivergence, TrainingError
from .losses import LossFunction, build_loss_fn
from .metrics import mse, rmse, sse
from .models import SpiralDynamics, count_parameters, flatten_model
from .pipeline import ExperimentResult, fit_spiral
from .plotting import plot_loss, plot_spiral_fit, plot_states_over_time, save_figure
from .solve import SolveResult, build_predict_fn, differentiable_ode_solve
from .training import TrainingResult, build_optimizer, train, train_phases

__all__ = [
    "__version__",
    "AdamPhase",
    "ExperimentConfig",
    "LBFGSPhase",
    "ModelConfig",
    "SolverConfig",
    "SpiralConfig",
    "enable_x64",
    "Trajectory",
    "build_spiral_dataset",
    "generate_spiral",
    "IntegrationFailure",
    "OptimizerDivergence",
    "TrainingError",
    "LossFunction",
    "build_loss_fn",
    "mse",
    "rmse",
    "sse",
    "SpiralDynamics",
    "count_parameters",
    "flatten_model",
    "ExperimentResult",
    "fit_spiral",
    "SpiralPlotCallback",
    "plot_loss",
    "plot_spiral_fit",
    "plot_states_over_time",
    "save_figure",
    "SolveResult",
    "build_predict_fn",
    "differentiable_ode_solve",
    "TrainingResult",
    "build_optimizer",
    "train",
    "train_phases",
]
