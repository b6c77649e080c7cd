# examples/triple_pendulum.py
import logging

from xpbd_sim import Simulation, Particle, particle_tracer, setup_logging

setup_logging(logging.DEBUG)

sim = Simulation(dt=1 / 60, substeps=40, observer=particle_tracer(3))
p0 = sim.add_particle(Particle.stationary((0.0, 0.0, 0.0), 1.0))
p1 = sim.add_particle(Particle.stationary((0.5, 0.0, 0.0), 0.5))
p2 = sim.add_particle(Particle.stationary((1.0, 0.0, 0.0), 0.5))
p3 = sim.add_particle(Particle.stationary((1.5, 0.0, 0.0), 0.5))

sim.add_fixed((0.0, 0.0, 0.0), p0)
sim.add_distance(0.5, p0, p1)
sim.add_distance(0.5, p1, p2)
sim.add_distance(0.5, p2, p3)

for _ in range(2):
    sim.step()

print("p3:", sim.particles[p3])
print("errors:", sim.errors())
