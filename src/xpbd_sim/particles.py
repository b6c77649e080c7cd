# MIT License (see LICENSE)
"""
Particle state and the dense particle store.

Defines the fundamental data structures:
- Particle: a point mass with position, previous position, velocity and
  inverse mass. Used to build and inspect state.
- ParticleStore: the index-addressed collection the integrator works on.
  State is kept as struct-of-arrays so the prediction and reconciliation
  stages run as whole-array numpy operations.

A particle's identity is its index in the store, assigned by insert() and
stable for the run. Particles are never removed.
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

import numpy as np

from .errors import InvalidMassError
from .util import f64, vec3


# =============================================================================
# Particle
# =============================================================================

@dataclass(eq=False)
class Particle:
    """
    A point mass.

    Attributes:
        position: Current position [x, y, z] in meters.
        previous_position: Position at the start of the last substep. Written
            by the prediction stage before it is ever read.
        velocity: Velocity [vx, vy, vz] in m/s.
        inverse_mass: 1/m in 1/kg. Zero means infinite mass: the particle is
            not moved by gravity or by constraint projection.

    Note:
        Vectors are converted to float64 numpy arrays on init.
    """
    position: np.ndarray | tuple[float, float, float] = (0.0, 0.0, 0.0)
    previous_position: np.ndarray | tuple[float, float, float] = (0.0, 0.0, 0.0)
    velocity: np.ndarray | tuple[float, float, float] = (0.0, 0.0, 0.0)
    inverse_mass: float = 1.0

    def __post_init__(self) -> None:
        self.position = vec3(self.position)
        self.previous_position = vec3(self.previous_position)
        self.velocity = vec3(self.velocity)
        self.inverse_mass = float(self.inverse_mass)
        if not (self.inverse_mass >= 0.0 and math.isfinite(self.inverse_mass)):
            raise InvalidMassError(f"inverse_mass must be finite and >= 0, got {self.inverse_mass}")

    @classmethod
    def new(cls, position, velocity, mass: float) -> Particle:
        """
        Create a particle with an initial velocity.

        Raises:
            InvalidMassError: if mass <= 0 or is not finite.
        """
        return cls(position=position, velocity=velocity, inverse_mass=_inverse_mass(mass))

    @classmethod
    def stationary(cls, position, mass: float) -> Particle:
        """Create a particle at rest."""
        return cls(position=position, inverse_mass=_inverse_mass(mass))

    @classmethod
    def static(cls, position) -> Particle:
        """Create an immovable particle (infinite mass)."""
        return cls(position=position, inverse_mass=0.0)

    @property
    def mass(self) -> float:
        """Mass in kg. Returns inf for static particles."""
        return math.inf if self.inverse_mass == 0.0 else 1.0 / self.inverse_mass


def _inverse_mass(mass: float) -> float:
    mass = float(mass)
    if not (mass > 0.0 and math.isfinite(mass)):
        raise InvalidMassError(f"mass must be finite and > 0, got {mass}")
    return 1.0 / mass


# =============================================================================
# Particle Store
# =============================================================================

@dataclass(eq=False)
class ParticleStore:
    """
    Dense, index-addressed particle collection.

    Row i of each array is the state of particle i. The arrays are public:
    constraints read and write rows directly, and hosts may read `position`
    for display after each tick.

    Attributes:
        position: (N, 3) current positions.
        previous_position: (N, 3) positions at the start of the substep.
        velocity: (N, 3) velocities.
        inverse_mass: (N,) inverse masses.
    """
    position: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float64))
    previous_position: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float64))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float64))
    inverse_mass: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float64))

    def __post_init__(self) -> None:
        self.position = f64(self.position).reshape(-1, 3)
        self.previous_position = f64(self.previous_position).reshape(-1, 3)
        self.velocity = f64(self.velocity).reshape(-1, 3)
        self.inverse_mass = f64(self.inverse_mass).reshape(-1)
        n = len(self.position)
        if not (len(self.previous_position) == len(self.velocity) == len(self.inverse_mass) == n):
            raise ValueError("ParticleStore arrays must all have the same length")
        if np.any(self.inverse_mass < 0.0) or not np.all(np.isfinite(self.inverse_mass)):
            raise InvalidMassError("inverse_mass entries must be finite and >= 0")

    @classmethod
    def from_particles(cls, particles: Iterable[Particle]) -> ParticleStore:
        """Pack a sequence of particles into a store, preserving order."""
        particles = list(particles)
        if not particles:
            return cls()
        return cls(
            position=np.stack([p.position for p in particles]),
            previous_position=np.stack([p.previous_position for p in particles]),
            velocity=np.stack([p.velocity for p in particles]),
            inverse_mass=np.array([p.inverse_mass for p in particles], dtype=np.float64),
        )

    def insert(self, particle: Particle) -> int:
        """
        Append a particle to the store.

        Returns:
            The particle's index, used by constraints to reference it.
        """
        index = len(self)
        self.position = np.vstack([self.position, particle.position])
        self.previous_position = np.vstack([self.previous_position, particle.previous_position])
        self.velocity = np.vstack([self.velocity, particle.velocity])
        self.inverse_mass = np.append(self.inverse_mass, particle.inverse_mass)
        return index

    def __len__(self) -> int:
        return len(self.position)

    def __getitem__(self, index: int) -> Particle:
        """Return a copy of particle `index` as a Particle value."""
        return Particle(
            position=self.position[index].copy(),
            previous_position=self.previous_position[index].copy(),
            velocity=self.velocity[index].copy(),
            inverse_mass=float(self.inverse_mass[index]),
        )

    def __iter__(self) -> Iterator[Particle]:
        for i in range(len(self)):
            yield self[i]

    def to_particles(self) -> list[Particle]:
        """Unpack the store into a list of independent Particle values."""
        return list(self)

    def write_back(self, particles: Sequence[Particle]) -> None:
        """Copy the store's state into existing Particle objects, index by index."""
        if len(particles) != len(self):
            raise ValueError(f"Expected {len(self)} particles, got {len(particles)}")
        for i, p in enumerate(particles):
            p.position = self.position[i].copy()
            p.previous_position = self.previous_position[i].copy()
            p.velocity = self.velocity[i].copy()

    def positions(self) -> np.ndarray:
        """Copy of the (N, 3) position array, for display."""
        return self.position.copy()

    def speeds(self) -> np.ndarray:
        """Per-particle speed |v|, e.g. to drive a colour channel."""
        return np.linalg.norm(self.velocity, axis=1)


def as_store(particles: ParticleStore | Sequence[Particle]) -> ParticleStore:
    """Return `particles` if it is already a store, otherwise pack it into one."""
    if isinstance(particles, ParticleStore):
        return particles
    return ParticleStore.from_particles(particles)
