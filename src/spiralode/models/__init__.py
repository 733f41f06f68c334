"""Dynamics networks used as neural ODE right-hand sides."""

from .mlp import SpiralDynamics, count_parameters, flatten_model

__all__ = [
    "SpiralDynamics",
    "count_parameters",
    "flatten_model",
]
