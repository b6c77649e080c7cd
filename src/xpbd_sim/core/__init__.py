# MIT License (see LICENSE)
"""
Core simulation components.

This subpackage provides:
    - simulate_iteration: The substepped XPBD tick.
    - predict / project / reconcile: The three per-substep stages.
    - Invariants: Kinetic energy, momentum and constraint residuals.

Typical usage:
    from xpbd_sim.core import simulate_iteration

    simulate_iteration(1/60, 40, store, constraints)
"""
from .integrator import (
    DEGENERATE_POLICIES,
    Observer,
    SubstepReport,
    particle_tracer,
    predict,
    project,
    reconcile,
    simulate_iteration,
)
from .invariants import kinetic_energy, linear_momentum, max_residual

__all__ = [
    # Integration
    "simulate_iteration",
    "predict",
    "project",
    "reconcile",
    # Observability
    "SubstepReport",
    "Observer",
    "particle_tracer",
    "DEGENERATE_POLICIES",
    # Invariants
    "kinetic_energy",
    "linear_momentum",
    "max_residual",
]
