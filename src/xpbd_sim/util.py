# MIT License (see LICENSE)
"""
Utility functions for vector math and numeric operations.

Provides low-level 3D vector operations used by the constraint solver,
plus small helpers for argument conversion. Vectors are numpy arrays
of shape (3,).
"""
from __future__ import annotations
import math
import os
from datetime import timedelta

import numpy as np

from .constants import WORKERS_ENV


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Used throughout the codebase to ensure consistent numeric precision
    and allow tuple/list inputs for positions and velocities.
    """
    return np.array(x, dtype=np.float64)


def vec3(x) -> np.ndarray:
    """Convert an array-like to a float64 vector of shape (3,)."""
    v = f64(x)
    if v.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {v.shape}")
    return v


def norm(v: np.ndarray) -> float:
    """Magnitude (length) of a 3D vector."""
    return math.sqrt(float(v[0] * v[0] + v[1] * v[1] + v[2] * v[2]))


def seconds(delta_t: float | timedelta) -> float:
    """Accept a duration as float seconds or a timedelta."""
    if isinstance(delta_t, timedelta):
        return delta_t.total_seconds()
    return float(delta_t)


def default_workers() -> int:
    """Worker count for the parallel stages, read from XPBD_SIM_WORKERS (default 1)."""
    raw = os.environ.get(WORKERS_ENV, "1")
    try:
        return max(1, int(raw))
    except ValueError:
        raise ValueError(f"{WORKERS_ENV} must be an integer, got {raw!r}") from None
