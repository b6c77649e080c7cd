# MIT License (see LICENSE)
"""
Substepped XPBD time integration.

One call to simulate_iteration advances the particles by delta_t, split
into `substeps` equal substeps of length h. Each substep runs three stages:

    (a) prediction       x_prev = x;  v += h g;  x += h v
    (b) projection       for c in constraints (in order): c.solve(particles, h)
    (c) reconciliation   v = (x - x_prev) / h

Stages (a) and (c) have no inter-particle dependency and run as whole-array
numpy operations, optionally split over a thread pool. Stage (b) is a
single Gauss-Seidel sweep: each constraint sees the positions already moved
by the constraints before it, so collection order changes the result.

Reference:
    Müller et al., "Detailed Rigid Body Simulation with Extended Position
    Based Dynamics", SCA 2020 (substepping, one iteration per substep).
"""
from __future__ import annotations
import logging
import math
import operator
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Iterable, Sequence

import numpy as np

from ..constants import GRAVITY, PARALLEL_MIN_PARTICLES
from ..constraints.solver import ConstraintLike, as_constraint, validate_indices
from ..errors import DegenerateConstraintError
from ..particles import Particle, ParticleStore, as_store
from ..profiler import Profiler
from ..util import default_workers, seconds, vec3

logger = logging.getLogger(__name__)

DEGENERATE_POLICIES = ("skip", "raise")


@dataclass(frozen=True)
class SubstepReport:
    """
    What happened during one substep, passed to observers.

    Attributes:
        index: Substep number within the call, from 0.
        substep_dt: Substep length h in seconds.
        skipped: Collection positions of constraints skipped as degenerate.
    """
    index: int
    substep_dt: float
    skipped: tuple[int, ...] = ()


Observer = Callable[[SubstepReport, ParticleStore], None]


def predict(store: ParticleStore, h: float, gravity: np.ndarray, moving: np.ndarray, rows: slice = slice(None)) -> None:
    """
    Explicit Euler prediction for the particles in `rows`.

    `moving` is the (N, 1) mask of particles with non-zero inverse mass;
    static particles keep their position.
    """
    pos = store.position[rows]
    vel = store.velocity[rows]
    store.previous_position[rows] = pos
    step = h * moving[rows]
    vel += step * gravity
    pos += step * vel


def reconcile(store: ParticleStore, h: float, rows: slice = slice(None)) -> None:
    """Derive velocities of the particles in `rows` from the positional change."""
    store.velocity[rows] = (store.position[rows] - store.previous_position[rows]) / h


def project(
    store: ParticleStore,
    constraints: Sequence[ConstraintLike],
    h: float,
    degenerate: str = "skip",
    substep: int = 0,
) -> tuple[int, ...]:
    """
    One Gauss-Seidel sweep over `constraints`, in order.

    Returns:
        Collection positions of constraints skipped because their gradient
        was undefined.

    Raises:
        DegenerateConstraintError: on the first degenerate constraint when
            degenerate == "raise".
    """
    skipped = []
    for i, c in enumerate(constraints):
        if c.solve(store, h):
            continue
        if degenerate == "raise":
            raise DegenerateConstraintError(
                f"constraint {i} ({type(c).__name__}) has a zero-length gradient in substep {substep}",
                constraint=c,
                substep=substep,
            )
        skipped.append(i)
    return tuple(skipped)


def _row_chunks(n: int, workers: int, threshold: int) -> list[slice]:
    """Split n rows into at most `workers` contiguous, disjoint slices."""
    if workers <= 1 or n < max(threshold, 2):
        return [slice(0, n)]
    bounds = np.linspace(0, n, min(workers, n) + 1).astype(int)
    return [slice(int(lo), int(hi)) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]


def _section(profiler: Profiler | None, name: str):
    return profiler.section(name) if profiler is not None else nullcontext()


def simulate_iteration(
    delta_t: float | timedelta,
    substeps: int,
    particles: ParticleStore | Sequence[Particle],
    constraints: Iterable[ConstraintLike],
    *,
    gravity=GRAVITY,
    degenerate: str = "skip",
    workers: int | None = None,
    parallel_threshold: int = PARALLEL_MIN_PARTICLES,
    profiler: Profiler | None = None,
    observer: Observer | None = None,
) -> None:
    """
    Advance the particles by one tick of length delta_t.

    Args:
        delta_t: Tick length in seconds (float) or a timedelta. Must be > 0.
        substeps: Number of substeps (>= 1). More substeps = stiffer, more
                  accurate constraints at proportionally higher cost.
        particles: A ParticleStore, updated in place, or a list of Particle
                   objects, whose state is written back after the tick.
        constraints: Ordered constraints. Solve order = collection order.
        gravity: Acceleration applied to every non-static particle.
        degenerate: "skip" leaves a constraint with an undefined gradient
                    untouched for that substep; "raise" raises
                    DegenerateConstraintError.
        workers: Threads for the prediction/reconciliation stages. Defaults
                 to XPBD_SIM_WORKERS (1).
        parallel_threshold: Minimum particle count before work is split.
        profiler: Optional Profiler; times validate/predict/project/reconcile.
        observer: Optional callback run after every substep.

    Raises:
        ValueError: on non-positive delta_t, substeps < 1 or bad options.
        InvalidIndexError: if a constraint references a missing particle.
            Checked before any particle is touched.
        DegenerateConstraintError: only with degenerate="raise". A list of
            particles is left as it was; a store keeps the partial tick.
    """
    dt = seconds(delta_t)
    if not (dt > 0.0 and math.isfinite(dt)):
        raise ValueError(f"delta_t must be finite and > 0, got {delta_t!r}")
    substeps = operator.index(substeps)
    if substeps < 1:
        raise ValueError(f"substeps must be >= 1, got {substeps}")
    if degenerate not in DEGENERATE_POLICIES:
        raise ValueError(f"Unknown degenerate policy: {degenerate!r} (expected one of {DEGENERATE_POLICIES})")
    workers = default_workers() if workers is None else int(workers)
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    store = as_store(particles)
    constraints = [as_constraint(c) for c in constraints]
    with _section(profiler, "validate"):
        validate_indices(constraints, len(store))

    h = dt / substeps
    g = vec3(gravity)
    moving = (store.inverse_mass > 0.0).astype(np.float64)[:, None]
    chunks = _row_chunks(len(store), workers, parallel_threshold)

    pool_ctx = ThreadPoolExecutor(max_workers=len(chunks)) if len(chunks) > 1 else nullcontext()
    with pool_ctx as pool:
        for k in range(substeps):
            with _section(profiler, "predict"):
                if pool is None:
                    predict(store, h, g, moving)
                else:
                    list(pool.map(lambda rows: predict(store, h, g, moving, rows), chunks))

            with _section(profiler, "project"):
                skipped = project(store, constraints, h, degenerate, k)
            if skipped:
                logger.debug("substep %d: skipped %d degenerate constraint(s) %s", k, len(skipped), skipped)

            with _section(profiler, "reconcile"):
                if pool is None:
                    reconcile(store, h)
                else:
                    list(pool.map(lambda rows: reconcile(store, h, rows), chunks))

            if observer is not None:
                observer(SubstepReport(index=k, substep_dt=h, skipped=skipped), store)

    if store is not particles:
        store.write_back(particles)


def particle_tracer(index: int, log: logging.Logger | None = None) -> Observer:
    """
    Observer that logs one particle's height and vertical velocity at DEBUG.

    Usage:
        simulate_iteration(1/60, 40, store, constraints, observer=particle_tracer(3))
    """
    log = log or logger

    def trace(report: SubstepReport, particles: ParticleStore) -> None:
        log.debug(
            "%2d, y: %s, dy/dt: %s",
            report.index,
            particles.position[index, 1],
            particles.velocity[index, 1],
        )

    return trace
