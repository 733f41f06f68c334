from __future__ import annotations

from pathlib import Path
from typing import Any, TypeVar

import equinox as eqx
import numpy as np

ModelT = TypeVar("ModelT", bound=eqx.Module)


def save_npz_bundle(path: str | Path, **arrays: Any) -> Path:
    """Write a spiral run to ``path`` as an uncompressed ``.npz``.

    ``ts`` and ``states`` (the sample times and noisy spiral data) are
    required. ``spiralode train`` adds ``prediction`` (the fitted trajectory at
    the same times) and ``params`` (the flat Parameter Vector); any other
    keyword is stored under its own name. ``None`` entries are dropped, and JAX
    arrays are copied to host with ``np.asarray``. Parent directories are
    created as needed.
    """

    if "ts" not in arrays or "states" not in arrays:
        raise ValueError("save_npz_bundle requires at least 'ts' and 'states' entries.")

    payload: dict[str, np.ndarray] = {}
    for name, value in arrays.items():
        if value is None:
            continue
        payload[name] = np.asarray(value)

    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    np.savez(output, **payload)
    return output


def save_model(path: str | Path, model: eqx.Module) -> Path:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    eqx.tree_serialise_leaves(output, model)
    return output


def load_model(path: str | Path, like: ModelT) -> ModelT:
    """Load leaves saved by :func:`save_model` into a model with ``like``'s structure."""

    return eqx.tree_deserialise_leaves(Path(path), like)
