# MIT License (see LICENSE)
"""
XPBD constraint kinds.

Each constraint moves the particles it references so that its error
function C moves towards zero, weighted by inverse mass and softened by
compliance (inverse stiffness). One projection for a substep of length h:

    grad_i  = dC/dx_i                      (unit length for both kinds here)
    lambda  = -C / (sum_i w_i + alpha / h²)
    x_i    += lambda * w_i * grad_i

With alpha = 0 the constraint is rigid and a single projection satisfies it
exactly (for the particles it touches). Larger alpha behaves like a spring
whose stiffness does not depend on the substep size.

Constraints are immutable values. The set of kinds is closed:

    Constraint = FixedConstraint | DistanceConstraint

but the integrator only relies on the ConstraintLike protocol (`indices`,
`solve`, `error`), so further kinds plug in without touching it.

Reference:
    Macklin, Müller, Chentanez, "XPBD: Position-Based Simulation of
    Compliant Constrained Dynamics", MIG 2016.
"""
from __future__ import annotations
import math
import operator
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, runtime_checkable

import numpy as np

from ..constants import DEGENERATE_EPS
from ..errors import InvalidComplianceError, InvalidIndexError
from ..particles import ParticleStore
from ..util import norm, vec3


@runtime_checkable
class ConstraintLike(Protocol):
    """Interface every constraint kind satisfies."""

    @property
    def indices(self) -> tuple[int, ...]: ...

    def solve(self, particles: ParticleStore, substep_dt: float) -> bool: ...

    def error(self, particles: ParticleStore) -> float: ...


def _check_compliance(compliance: float) -> float:
    compliance = float(compliance)
    if not (compliance >= 0.0 and math.isfinite(compliance)):
        raise InvalidComplianceError(f"compliance must be finite and >= 0, got {compliance}")
    return compliance


def _check_index(index: int) -> int:
    index = operator.index(index)
    if index < 0:
        raise InvalidIndexError(f"particle index must be >= 0, got {index}", index=index)
    return index


@dataclass(frozen=True, eq=False)
class FixedConstraint:
    """
    Pins a particle to a point in space.

    C = |x - anchor|, gradient = (x - anchor) / |x - anchor|.

    Attributes:
        anchor: World-space anchor point [x, y, z].
        index: Index of the pinned particle.
        compliance: Inverse stiffness. 0 pins rigidly.
    """
    anchor: np.ndarray
    index: int
    compliance: float = 0.0

    def __post_init__(self) -> None:
        anchor = vec3(self.anchor)
        anchor.flags.writeable = False
        object.__setattr__(self, "anchor", anchor)
        object.__setattr__(self, "index", _check_index(self.index))
        object.__setattr__(self, "compliance", _check_compliance(self.compliance))

    @property
    def indices(self) -> tuple[int, ...]:
        return (self.index,)

    def error(self, particles: ParticleStore) -> float:
        """Distance from the particle to the anchor."""
        return norm(particles.position[self.index] - self.anchor)

    def solve(self, particles: ParticleStore, substep_dt: float) -> bool:
        """
        Project the particle towards the anchor.

        Returns:
            False if the particle sits on the anchor, where the gradient is
            undefined. Positions are left unchanged in that case.
        """
        pos = particles.position
        w = particles.inverse_mass[self.index]

        d = pos[self.index] - self.anchor
        c = norm(d)
        if c < DEGENERATE_EPS:
            return False

        denom = w + self.compliance / (substep_dt * substep_dt)
        if denom == 0.0:
            return True

        grad = d / c
        lam = -c / denom
        pos[self.index] += lam * w * grad
        return True


@dataclass(frozen=True, eq=False)
class DistanceConstraint:
    """
    Keeps two particles at a fixed distance (a rod, or a spring if compliant).

    C = |x_b - x_a| - rest_length,
    gradient_b = (x_b - x_a) / |x_b - x_a|, gradient_a = -gradient_b.

    Attributes:
        rest_length: Target distance in meters (> 0).
        index_a: Index of the first particle.
        index_b: Index of the second particle.
        compliance: Inverse stiffness. 0 is a rigid rod.
    """
    rest_length: float
    index_a: int
    index_b: int
    compliance: float = 0.0

    def __post_init__(self) -> None:
        rest_length = float(self.rest_length)
        if not (rest_length > 0.0 and math.isfinite(rest_length)):
            raise ValueError(f"rest_length must be finite and > 0, got {rest_length}")
        object.__setattr__(self, "rest_length", rest_length)
        object.__setattr__(self, "index_a", _check_index(self.index_a))
        object.__setattr__(self, "index_b", _check_index(self.index_b))
        if self.index_a == self.index_b:
            raise ValueError(f"DistanceConstraint needs two distinct particles, got {self.index_a} twice")
        object.__setattr__(self, "compliance", _check_compliance(self.compliance))

    @property
    def indices(self) -> tuple[int, ...]:
        return (self.index_a, self.index_b)

    def error(self, particles: ParticleStore) -> float:
        """Signed stretch: current distance minus rest length."""
        pos = particles.position
        return norm(pos[self.index_b] - pos[self.index_a]) - self.rest_length

    def solve(self, particles: ParticleStore, substep_dt: float) -> bool:
        """
        Move both particles along the line joining them.

        Returns:
            False if the particles coincide, where the direction is
            undefined. Positions are left unchanged in that case.
        """
        a, b = self.index_a, self.index_b
        pos = particles.position
        w_a = particles.inverse_mass[a]
        w_b = particles.inverse_mass[b]

        d = pos[b] - pos[a]
        dist = norm(d)
        if dist < DEGENERATE_EPS:
            return False

        denom = w_a + w_b + self.compliance / (substep_dt * substep_dt)
        if denom == 0.0:
            return True

        # grad_b = n, grad_a = -n; both unit length so they drop out of denom.
        n = d / dist
        lam = -(dist - self.rest_length) / denom
        pos[a] -= lam * w_a * n
        pos[b] += lam * w_b * n
        return True


# Union type for constraint dispatch
Constraint = FixedConstraint | DistanceConstraint

CONSTRAINT_KINDS: tuple[type, ...] = (FixedConstraint, DistanceConstraint)


def fixed(anchor, index: int, compliance: float = 0.0) -> FixedConstraint:
    """Pin particle `index` to `anchor`."""
    return FixedConstraint(anchor=anchor, index=index, compliance=compliance)


def distance(rest_length: float, index_a: int, index_b: int, compliance: float = 0.0) -> DistanceConstraint:
    """Link particles `index_a` and `index_b` at `rest_length`."""
    return DistanceConstraint(rest_length=rest_length, index_a=index_a, index_b=index_b, compliance=compliance)


def as_constraint(obj) -> ConstraintLike:
    """
    Accept `obj` as an entry of a constraint collection.

    Built-in kinds pass straight through; other objects must satisfy
    ConstraintLike.

    Raises:
        TypeError: if obj is not a constraint.
    """
    if isinstance(obj, CONSTRAINT_KINDS) or isinstance(obj, ConstraintLike):
        return obj
    raise TypeError(f"Not a constraint: {type(obj).__name__}")


def validate_indices(constraints: Sequence[ConstraintLike], n_particles: int) -> None:
    """
    Check every index referenced by `constraints` against the store size.

    Raises:
        InvalidIndexError: naming the first offending constraint position.
    """
    for pos, c in enumerate(constraints):
        for i in c.indices:
            if not 0 <= i < n_particles:
                raise InvalidIndexError(
                    f"constraint {pos} ({type(c).__name__}) references particle {i}, "
                    f"but only {n_particles} particles exist",
                    constraint_pos=pos,
                    index=i,
                )


def constraint_errors(particles: ParticleStore, constraints: Iterable[ConstraintLike]) -> np.ndarray:
    """Current error of each constraint, in collection order."""
    return np.array([c.error(particles) for c in constraints], dtype=np.float64)
