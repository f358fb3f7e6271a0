"""
N-body simulator - brute-force gravitational N-body integration.

Features:
- Direct pairwise forces with softening (Newton's third law pairing)
- Semi-implicit Euler integration
- Multi-threaded force and integration phases
- Periodic position snapshots written as .npy matrices
- CLI interface
"""

__version__ = "0.1.0"

from nbody_sim.physics.simulator import Simulator
from nbody_sim.physics.bodies import BodyState
from nbody_sim.physics.snapshot import RunParameters

__all__ = [
    "Simulator",
    "BodyState",
    "RunParameters",
]
