# MIT License (see LICENSE)
"""
Helpers that build common particle/constraint setups.
"""
from __future__ import annotations

from .constraints.solver import ConstraintLike, distance, fixed
from .particles import Particle, ParticleStore
from .util import norm, vec3


def build_chain(
    links: int,
    spacing: float = 1.0,
    direction=(0.0, 1.0, 0.0),
    mass: float = 1.0,
    compliance: float = 0.0,
    anchor=(0.0, 0.0, 0.0),
    anchor_mass: float | None = None,
) -> tuple[ParticleStore, list[ConstraintLike]]:
    """
    Build a straight chain of `links` distance links hanging off a fixed anchor.

    Particle 0 sits on the anchor and is pinned there by a FixedConstraint
    (always rigid). Particle i sits at anchor + i * spacing * direction and is
    linked to particle i - 1 at rest length `spacing`. The chain starts at
    rest with every link exactly at rest length.

    Args:
        links: Number of distance links (the chain has links + 1 particles).
        spacing: Rest length of each link.
        direction: Direction the chain extends in; normalized here.
        mass: Mass of each non-anchor particle.
        compliance: Compliance of the distance links.
        anchor: Anchor point and position of particle 0.
        anchor_mass: Mass of particle 0, defaults to `mass`.

    Returns:
        (store, constraints) with the Fixed constraint first, then links in
        order from the anchor outwards.
    """
    if links < 0:
        raise ValueError(f"links must be >= 0, got {links}")
    d = vec3(direction)
    length = norm(d)
    if length == 0.0:
        raise ValueError("direction must be non-zero")
    d = d / length
    origin = vec3(anchor)

    particles = [Particle.stationary(origin, mass if anchor_mass is None else anchor_mass)]
    constraints: list[ConstraintLike] = [fixed(origin, 0)]
    for i in range(1, links + 1):
        particles.append(Particle.stationary(origin + (i * spacing) * d, mass))
        constraints.append(distance(spacing, i - 1, i, compliance))
    return ParticleStore.from_particles(particles), constraints
