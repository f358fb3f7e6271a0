"""Semi-implicit (symplectic) Euler integrator."""

import numpy as np
from nbody_sim.physics.bodies import BodyState
from nbody_sim.physics.integrators.base import Integrator


class SemiImplicitEulerIntegrator(Integrator):
    """Semi-implicit Euler: velocity first, then position with the new velocity.
    
    v_new = v + (F / m) * dt
    r_new = r + v_new * dt
    
    Symplectic and first order. Operates on a contiguous body range so the
    scheduler can hand disjoint ranges to different threads.
    """
    
    @property
    def name(self) -> str:
        return "semi-implicit-euler"
    
    @property
    def order(self) -> int:
        return 1
    
    def step(self, state: BodyState, forces: np.ndarray, dt: float, start: int = 0, stop: int = None) -> None:
        if stop is None:
            stop = state.n_bodies
        if start >= stop:
            return
        
        # a = F / m
        accelerations = forces[start:stop] / state.masses[start:stop, np.newaxis]
        
        velocities = state.velocities[start:stop]
        velocities += accelerations * dt
        
        positions = state.positions[start:stop]
        positions += velocities * dt
