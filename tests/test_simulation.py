import logging

import numpy as np
import pytest

from xpbd_sim import Simulation, setup_logging
from xpbd_sim.builders import build_chain
from xpbd_sim.constraints import fixed
from xpbd_sim.core import kinetic_energy, linear_momentum, max_residual
from xpbd_sim.errors import InvalidIndexError
from xpbd_sim.particles import Particle, ParticleStore
from xpbd_sim.profiler import Profiler


def test_simulation_builds_and_steps_a_pendulum():
    sim = Simulation(dt=1 / 100, substeps=20)
    anchor = sim.add_particle(Particle.stationary((0.0, 0.0, 0.0), 1.0))
    bob = sim.add_particle(Particle.stationary((0.6, -0.8, 0.0), 1.0))
    sim.add_fixed((0.0, 0.0, 0.0), anchor)
    sim.add_distance(1.0, anchor, bob)

    for _ in range(100):
        sim.step()

    assert sim.time == pytest.approx(1.0)
    errs = sim.errors()
    assert errs.shape == (2,)
    assert np.max(np.abs(errs)) < 1e-3
    # The bob swung through the bottom and is somewhere on the circle
    assert np.linalg.norm(sim.particles.position[bob]) == pytest.approx(1.0, abs=1e-3)


def test_simulation_step_accepts_custom_dt():
    sim = Simulation()
    sim.add_particle(Particle.stationary((0.0, 0.0, 0.0), 1.0))
    sim.step(0.05)
    sim.step()
    assert sim.time == pytest.approx(0.06)


def test_simulation_rejects_dangling_constraints():
    sim = Simulation()
    sim.add_particle(Particle.stationary((0.0, 0.0, 0.0), 1.0))
    with pytest.raises(InvalidIndexError):
        sim.add_distance(1.0, 0, 1)
    assert sim.constraints == []

    with pytest.raises(InvalidIndexError):
        Simulation(constraints=[fixed((0.0, 0.0, 0.0), 0)])


@pytest.mark.parametrize(
    "kwargs",
    [{"dt": 0.0}, {"substeps": 0}, {"degenerate": "warn"}],
)
def test_simulation_rejects_bad_parameters(kwargs):
    with pytest.raises(ValueError):
        Simulation(**kwargs)


def test_simulation_from_existing_state_and_profiler(caplog):
    store, constraints = build_chain(4, spacing=0.5, direction=(0.0, -1.0, 0.0))
    prof = Profiler()
    with caplog.at_level(logging.INFO, logger="xpbd_sim"):
        sim = Simulation(particles=store, constraints=constraints, substeps=8, profiler=prof)
    assert any("5 particles, 5 constraints" in r.getMessage() for r in caplog.records)

    sim.step()
    sim.step()
    assert prof.stats.summary()["project"]["n"] == 16
    assert sim.particles is store


def test_kinetic_energy_and_momentum():
    store = ParticleStore.from_particles([
        Particle.new((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 2.0),
        Particle.new((0.0, 0.0, 0.0), (0.0, -2.0, 0.0), 0.5),
        Particle(position=(0.0, 0.0, 0.0), velocity=(9.0, 9.0, 9.0), inverse_mass=0.0),
    ])
    # 0.5*2*1 + 0.5*0.5*4; the static particle does not count
    assert kinetic_energy(store) == pytest.approx(2.0)
    np.testing.assert_allclose(linear_momentum(store), [2.0, -1.0, 0.0])


def test_free_fall_energy_gain_matches_potential_drop():
    store = ParticleStore.from_particles([Particle.stationary((0.0, 0.0, 0.0), 2.0)])
    sim = Simulation(particles=store, dt=0.5, substeps=500)
    sim.step()
    drop = -store.position[0, 1]
    assert kinetic_energy(store) == pytest.approx(2.0 * 9.81 * drop, rel=1e-2)


def test_max_residual():
    store, constraints = build_chain(3, spacing=1.0)
    assert max_residual(store, constraints) == pytest.approx(0.0, abs=1e-12)
    store.position[3, 1] += 0.25
    assert max_residual(store, constraints) == pytest.approx(0.25)
    assert max_residual(store, []) == 0.0


def test_setup_logging_configures_package_logger(tmp_path):
    log_file = tmp_path / "sim.log"
    logger = setup_logging(logging.DEBUG, str(log_file))
    try:
        assert logger.name == "xpbd_sim"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        # Calling again replaces rather than duplicates handlers
        setup_logging(logging.INFO)
        assert len(logger.handlers) == 1
    finally:
        for h in list(logger.handlers):
            h.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
