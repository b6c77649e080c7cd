# MIT License (see LICENSE)
"""
xpbd_sim - Particle dynamics with Extended Position-Based Dynamics.

This package advances point masses under gravity and geometric constraints
(fixed anchors, distance links) with a substepped XPBD solver.

Main entry points:
    - simulate_iteration: Advance particles and constraints by one tick.
    - Particle, ParticleStore: Point-mass state and the dense store.
    - fixed, distance: Constraint construction helpers.
    - Simulation: World container holding state, parameters and a clock.

Submodules:
    - constraints: Constraint kinds and validation.
    - core: Integrator stages and invariants.
    - builders: Ready-made chains.

Example:
    from xpbd_sim import Particle, fixed, distance, simulate_iteration

    particles = [Particle.stationary((0, 0, 0), 1.0), Particle.stationary((0, -0.5, 0), 1.0)]
    constraints = [fixed((0, 0, 0), 0), distance(0.5, 0, 1)]
    simulate_iteration(1 / 60, 40, particles, constraints)
"""
from .builders import build_chain
from .constants import GRAVITY
from .constraints import (
    Constraint,
    ConstraintLike,
    DistanceConstraint,
    FixedConstraint,
    as_constraint,
    constraint_errors,
    distance,
    fixed,
)
from .core import SubstepReport, particle_tracer, simulate_iteration
from .errors import (
    DegenerateConstraintError,
    InvalidComplianceError,
    InvalidIndexError,
    InvalidMassError,
    XPBDError,
)
from .logging_config import setup_logging
from .particles import Particle, ParticleStore, as_store
from .profiler import Profiler
from .simulation import Simulation

__all__ = [
    # Core simulation
    "simulate_iteration",
    "Simulation",
    "SubstepReport",
    "particle_tracer",
    "GRAVITY",
    # Particles
    "Particle",
    "ParticleStore",
    "as_store",
    # Constraints
    "Constraint",
    "ConstraintLike",
    "FixedConstraint",
    "DistanceConstraint",
    "fixed",
    "distance",
    "as_constraint",
    "constraint_errors",
    "build_chain",
    # Errors
    "XPBDError",
    "InvalidMassError",
    "InvalidComplianceError",
    "InvalidIndexError",
    "DegenerateConstraintError",
    # Tooling
    "Profiler",
    "setup_logging",
]
