"""Abstract base class for numerical integrators."""

from abc import ABC, abstractmethod
import numpy as np
from nbody_sim.physics.bodies import BodyState


class Integrator(ABC):
    """Abstract interface for numerical integrators."""
    
    @abstractmethod
    def step(self, state: BodyState, forces: np.ndarray, dt: float, start: int = 0, stop: int = None) -> None:
        """Advance bodies ``[start, stop)`` by one time step, in place.
        
        Args:
            state: Body state to mutate
            forces: Finalized forces for this step (n, 3)
            dt: Time step
            start: First body (inclusive)
            stop: Last body (exclusive), defaults to all bodies
        """
        pass
    
    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this integrator."""
        pass
    
    @property
    @abstractmethod
    def order(self) -> int:
        """Return the order of accuracy."""
        pass
