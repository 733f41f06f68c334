from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

import jax

AdjointName = Literal["recursive_checkpoint", "backsolve"]
_ADJOINTS = ("recursive_checkpoint", "backsolve")


def enable_x64() -> None:
    """Switch JAX to double precision; call before creating any arrays."""

    jax.config.update("jax_enable_x64", True)


@dataclass(frozen=True)
class SpiralConfig:
    noise: float = 0.1
    t_final: float = 4.0
    num_samples: int = 60
    seed: int = 0

    def __post_init__(self: "SpiralConfig") -> None:
        if self.noise < 0.0:
            raise ValueError("noise cannot be negative.")
        if self.t_final <= 0.0:
            raise ValueError("t_final must be positive.")
        if self.num_samples < 2:
            raise ValueError("num_samples must be at least 2.")

    @property
    def dt(self: "SpiralConfig") -> float:
        return self.t_final / (self.num_samples - 1)


@dataclass(frozen=True)
class ModelConfig:
    state_size: int = 2
    hidden_size: int = 20
    seed: int = 1

    def __post_init__(self: "ModelConfig") -> None:
        if self.state_size <= 0:
            raise ValueError("state_size must be positive.")
        if self.hidden_size <= 0:
            raise ValueError("hidden_size must be positive.")


@dataclass(frozen=True)
class SolverConfig:
    rtol: float = 1e-6
    atol: float = 1e-6
    max_steps: int = 4096
    dt0: float | None = None
    adjoint: AdjointName = "recursive_checkpoint"

    def __post_init__(self: "SolverConfig") -> None:
        if self.rtol <= 0.0 or self.atol <= 0.0:
            raise ValueError("rtol and atol must be positive.")
        if self.max_steps <= 0:
            raise ValueError("max_steps must be positive.")
        if self.dt0 is not None and self.dt0 <= 0.0:
            raise ValueError("dt0 must be positive when provided.")
        if self.adjoint not in _ADJOINTS:
            raise ValueError(
                f"Unknown adjoint '{self.adjoint}'. Expected one of {_ADJOINTS}."
            )


@dataclass(frozen=True)
class AdamPhase:
    """First-order coarse phase: fixed iteration budget, no early stopping."""

    learning_rate: float = 0.05
    max_iters: int = 600

    def __post_init__(self: "AdamPhase") -> None:
        if self.learning_rate <= 0.0:
            raise ValueError("learning_rate must be positive.")
        if self.max_iters < 0:
            raise ValueError("max_iters cannot be negative.")

    @property
    def name(self: "AdamPhase") -> str:
        return "adam"


@dataclass(frozen=True)
class LBFGSPhase:
    """Quasi-Newton refinement phase driven by a zoom line search.

    ``allow_loss_increase`` keeps iterating when an accepted step raises the
    loss; with it disabled such a step ends the phase.
    """

    max_iters: int = 1000
    memory_size: int = 10
    gtol: float = 1e-8
    allow_loss_increase: bool = True
    max_linesearch_steps: int = 20

    def __post_init__(self: "LBFGSPhase") -> None:
        if self.max_iters < 0:
            raise ValueError("max_iters cannot be negative.")
        if self.memory_size <= 0:
            raise ValueError("memory_size must be positive.")
        if self.gtol < 0.0:
            raise ValueError("gtol cannot be negative.")
        if self.max_linesearch_steps <= 0:
            raise ValueError("max_linesearch_steps must be positive.")

    @property
    def name(self: "LBFGSPhase") -> str:
        return "lbfgs"


OptimizerPhase = AdamPhase | LBFGSPhase


@dataclass(frozen=True)
class ExperimentConfig:
    spiral: SpiralConfig = field(default_factory=SpiralConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    solver: SolverConfig = field(default_factory=SolverConfig)
    adam: AdamPhase = field(default_factory=AdamPhase)
    lbfgs: LBFGSPhase = field(default_factory=LBFGSPhase)
    callback_every: int = 3

    def __post_init__(self: "ExperimentConfig") -> None:
        if self.callback_every <= 0:
            raise ValueError("callback_every must be positive.")
