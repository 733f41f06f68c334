from __future__ import annotations


class TrainingError(RuntimeError):
    """Base class for failures that abort a training run."""


class IntegrationFailure(TrainingError):
    """The adaptive solver could not meet its tolerances within the step budget."""

    def __init__(self, iteration: int | None, message: str | None = None) -> None:
        self.iteration = iteration
        where = "final evaluation" if iteration is None else f"iteration {iteration}"
        super().__init__(message or f"ODE integration failed at {where}.")


class OptimizerDivergence(TrainingError):
    """The loss became non-finite."""

    def __init__(self, iteration: int | None, loss: float) -> None:
        self.iteration = iteration
        self.loss = loss
        where = "final evaluation" if iteration is None else f"iteration {iteration}"
        super().__init__(f"Loss diverged to {loss!r} at {where}.")
