# MIT License (see LICENSE)
"""
Constraint kinds for the XPBD solver.

This subpackage provides:
    - FixedConstraint: Pins a particle to a world-space anchor.
    - DistanceConstraint: Keeps two particles at a rest length.
    - fixed / distance: Construction helpers.
    - as_constraint: Accepts built-in kinds or any ConstraintLike object.

Typical usage:
    from xpbd_sim.constraints import fixed, distance

    constraints = [fixed((0, 0, 0), 0), distance(0.5, 0, 1)]
"""
from .solver import (
    CONSTRAINT_KINDS,
    Constraint,
    ConstraintLike,
    DistanceConstraint,
    FixedConstraint,
    as_constraint,
    constraint_errors,
    distance,
    fixed,
    validate_indices,
)

__all__ = [
    # Kinds
    "Constraint",
    "ConstraintLike",
    "FixedConstraint",
    "DistanceConstraint",
    "CONSTRAINT_KINDS",
    # Construction
    "fixed",
    "distance",
    "as_constraint",
    # Checks
    "validate_indices",
    "constraint_errors",
]
