# MIT License (see LICENSE)
"""
Numerical constants used throughout the simulation.

All values use SI units (meters, seconds, kilograms).
"""
from __future__ import annotations

# Standard gravity pointing down the y axis, in m/s².
GRAVITY: tuple[float, float, float] = (0.0, -9.81, 0.0)

# Vectors shorter than this have no usable direction. A constraint whose
# gradient would be normalized from such a vector is treated as degenerate.
DEGENERATE_EPS: float = 1e-12

# Below this particle count the prediction and reconciliation stages run on
# the calling thread even when a worker pool is requested; the per-task
# overhead outweighs the vectorised work on small stores.
PARALLEL_MIN_PARTICLES: int = 4096

# Environment variable holding the default worker count for the parallel stages.
WORKERS_ENV: str = "XPBD_SIM_WORKERS"
