# MIT License (see LICENSE)
"""
The simulation world container.

The Simulation class bundles what a host keeps between ticks:
- The particle store and the ordered constraint list.
- Solver parameters (gravity, tick length, substeps, degenerate policy,
  worker count).
- The simulation clock.

Structure:
    - User creates a Simulation.
    - User adds particles via add_particle() and constraints via
      add_fixed() / add_distance().
    - User calls sim.step() once per fixed tick and reads sim.particles.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field

import numpy as np

from .constants import GRAVITY
from .constraints.solver import (
    ConstraintLike,
    DistanceConstraint,
    FixedConstraint,
    as_constraint,
    constraint_errors,
    distance,
    fixed,
    validate_indices,
)
from .core.integrator import DEGENERATE_POLICIES, Observer, simulate_iteration
from .particles import Particle, ParticleStore
from .profiler import Profiler

logger = logging.getLogger(__name__)


@dataclass
class Simulation:
    """
    Particle simulation world.

    Attributes:
        gravity: Global gravity vector (default: [0, -9.81, 0]).
        dt: Fixed tick length in seconds (default: 1/100).
        substeps: Substeps per tick. Higher = stiffer constraints but slower.
                  Default: 20.
        degenerate: Policy for constraints with an undefined gradient,
                    "skip" or "raise".
        workers: Threads for the data-parallel stages; None reads
                 XPBD_SIM_WORKERS.
        profiler: Optional Profiler instance for timing statistics.
        observer: Optional per-substep callback.
    """
    gravity: tuple[float, float, float] = GRAVITY
    dt: float = 1 / 100
    substeps: int = 20
    degenerate: str = "skip"
    workers: int | None = None
    profiler: Profiler | None = None
    observer: Observer | None = None

    # World state
    particles: ParticleStore = field(default_factory=ParticleStore)
    constraints: list[ConstraintLike] = field(default_factory=list)
    time: float = 0.0

    def __post_init__(self) -> None:
        if not (self.dt > 0.0 and math.isfinite(self.dt)):
            raise ValueError(f"dt must be finite and > 0, got {self.dt}")
        if self.substeps < 1:
            raise ValueError(f"substeps must be >= 1, got {self.substeps}")
        if self.degenerate not in DEGENERATE_POLICIES:
            raise ValueError(f"Unknown degenerate policy: {self.degenerate!r}")
        self.constraints = [as_constraint(c) for c in self.constraints]
        validate_indices(self.constraints, len(self.particles))
        logger.info(
            "Simulation created: %d particles, %d constraints, dt=%g, substeps=%d",
            len(self.particles), len(self.constraints), self.dt, self.substeps,
        )

    def add_particle(self, particle: Particle) -> int:
        """
        Add a particle to the simulation.

        Returns:
            The particle's index, used to reference it from constraints.
        """
        return self.particles.insert(particle)

    def add_constraint(self, constraint: ConstraintLike) -> ConstraintLike:
        """
        Append a constraint; it is solved after all earlier ones.

        Raises:
            InvalidIndexError: if it references a particle not yet added.
        """
        constraint = as_constraint(constraint)
        validate_indices([constraint], len(self.particles))
        self.constraints.append(constraint)
        return constraint

    def add_fixed(self, anchor, index: int, compliance: float = 0.0) -> FixedConstraint:
        """Pin particle `index` to `anchor`."""
        return self.add_constraint(fixed(anchor, index, compliance))

    def add_distance(self, rest_length: float, index_a: int, index_b: int, compliance: float = 0.0) -> DistanceConstraint:
        """Link two particles at `rest_length`."""
        return self.add_constraint(distance(rest_length, index_a, index_b, compliance))

    def step(self, dt: float | None = None) -> None:
        """Advance the simulation by one tick (default: self.dt)."""
        dt = float(self.dt if dt is None else dt)
        simulate_iteration(
            dt,
            self.substeps,
            self.particles,
            self.constraints,
            gravity=self.gravity,
            degenerate=self.degenerate,
            workers=self.workers,
            profiler=self.profiler,
            observer=self.observer,
        )
        self.time += dt

    def errors(self) -> np.ndarray:
        """Current error of every constraint, in solve order."""
        return constraint_errors(self.particles, self.constraints)
