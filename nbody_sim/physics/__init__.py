"""Physics engine for N-body simulations."""

from nbody_sim.physics.bodies import BodyState
from nbody_sim.physics.simulator import Simulator, SimulationState

__all__ = ["BodyState", "Simulator", "SimulationState"]
