# MIT License (see LICENSE)
"""
Exceptions raised by the simulation.

Every failure is either a violated caller contract (bad mass, compliance or
index) or the explicit degenerate-constraint policy. Each class also derives
from the matching builtin so callers can catch ValueError/IndexError as usual.
"""
from __future__ import annotations


class XPBDError(Exception):
    """Base class for all simulation errors."""


class InvalidMassError(XPBDError, ValueError):
    """A particle was constructed with mass <= 0 (or a non-finite mass)."""


class InvalidComplianceError(XPBDError, ValueError):
    """A constraint was constructed with a negative or non-finite compliance."""


class InvalidIndexError(XPBDError, IndexError):
    """A constraint references a particle index outside the collection."""

    def __init__(self, message: str, constraint_pos: int | None = None, index: int | None = None) -> None:
        super().__init__(message)
        self.constraint_pos = constraint_pos
        self.index = index


class DegenerateConstraintError(XPBDError, ArithmeticError):
    """
    A constraint gradient would be normalized from a zero-length vector.

    Only raised when the solver runs with degenerate="raise"; the default
    policy skips the correction for that substep instead.
    """

    def __init__(self, message: str, constraint=None, substep: int | None = None) -> None:
        super().__init__(message)
        self.constraint = constraint
        self.substep = substep
