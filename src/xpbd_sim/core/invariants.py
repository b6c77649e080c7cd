# MIT License (see LICENSE)
"""
Conserved quantities and constraint residuals.

Used for verifying simulation correctness and characterising convergence.
Static particles (inverse_mass == 0) carry infinite mass and are left out
of the energy and momentum sums.
"""
from __future__ import annotations
from typing import Iterable

import numpy as np

from ..constraints.solver import ConstraintLike, constraint_errors
from ..particles import ParticleStore


def _masses(particles: ParticleStore) -> np.ndarray:
    """Per-particle mass, 0 for static particles so they drop out of sums."""
    w = particles.inverse_mass
    out = np.zeros_like(w)
    np.divide(1.0, w, out=out, where=w > 0.0)
    return out


def kinetic_energy(particles: ParticleStore) -> float:
    """
    Total kinetic energy of the dynamic particles.

    T = Σ 0.5 * m * |v|²
    """
    v_sq = np.einsum("ij,ij->i", particles.velocity, particles.velocity)
    return float(0.5 * np.dot(_masses(particles), v_sq))


def linear_momentum(particles: ParticleStore) -> np.ndarray:
    """
    Total linear momentum P = Σ m v of the dynamic particles.

    Returns:
        Momentum vector [Px, Py, Pz] in kg·m/s.
    """
    return _masses(particles) @ particles.velocity


def max_residual(particles: ParticleStore, constraints: Iterable[ConstraintLike]) -> float:
    """Largest |C| over `constraints`, 0.0 for an empty collection."""
    errors = constraint_errors(particles, constraints)
    return float(np.max(np.abs(errors))) if errors.size else 0.0
