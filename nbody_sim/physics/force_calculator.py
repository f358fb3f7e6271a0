"""Direct-summation gravitational force calculation.

Each unordered pair (i, j) with j < i is evaluated once. The pair force is
added to body i and subtracted from body j, so the contributions of a pair are
exact negations of each other.

Softening enters both the magnitude and the direction: with
``s = |p_j - p_i|^2 + eps`` the force on i due to j is
``G * m_i * m_j / s * (p_j - p_i) / sqrt(s)``, which stays finite (zero) for
coincident bodies.
"""

import numpy as np
from typing import Optional
from nbody_sim.physics.bodies import BodyState

# Gravitational constant in N m^2 / kg^2 (m^3 / kg / s^2)
GRAVITATIONAL_CONSTANT = 6.6743015e-11

# Softening added to squared distances (m^2)
SOFTENING = 1e-9


def distance(a, b) -> float:
    """Euclidean distance between two positions."""
    diff = np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)
    return float(np.sqrt(np.dot(diff, diff)))


def pair_force(
    mass_i: float,
    mass_j: float,
    position_i,
    position_j,
    G: float = GRAVITATIONAL_CONSTANT,
    softening: float = SOFTENING,
) -> np.ndarray:
    """Force on body i due to body j.

    Args:
        mass_i: Mass of body i
        mass_j: Mass of body j
        position_i: Position of body i (3,)
        position_j: Position of body j (3,)
        G: Gravitational constant
        softening: Softening added to the squared distance

    Returns:
        Force vector (3,) pointing from i toward j
    """
    r_diff = np.asarray(position_j, dtype=np.float64) - np.asarray(position_i, dtype=np.float64)
    r_soft_sq = np.dot(r_diff, r_diff) + softening
    scale = G * mass_i * mass_j / (r_soft_sq * np.sqrt(r_soft_sq))
    return scale * r_diff


class ForceCalculator:
    """Pairwise force accumulation with explicit physical constants."""

    def __init__(self, G: float = GRAVITATIONAL_CONSTANT, softening: float = SOFTENING):
        if softening <= 0:
            raise ValueError(f"softening must be positive, got {softening}")
        self.G = G
        self.softening = softening

    def accumulate_rows(
        self,
        positions: np.ndarray,
        masses: np.ndarray,
        start: int,
        stop: int,
        out: np.ndarray,
    ) -> np.ndarray:
        """Accumulate pair forces for rows ``i in [start, stop)`` into ``out``.

        For each row i the pairs (i, j), j < i, are evaluated together. The
        caller owns ``out`` and is responsible for zeroing it; concurrent
        callers must each pass a private buffer since row i also writes to
        every j < i.

        Args:
            positions: Positions (n, 3)
            masses: Masses (n,)
            start: First row (inclusive)
            stop: Last row (exclusive)
            out: Force buffer (n, 3), updated in place

        Returns:
            ``out``
        """
        G = self.G
        eps = self.softening
        for i in range(max(start, 1), stop):
            r_diff = positions[:i] - positions[i]
            r_soft_sq = np.einsum("ij,ij->i", r_diff, r_diff) + eps
            scale = (G * masses[i]) * masses[:i] / (r_soft_sq * np.sqrt(r_soft_sq))
            pair_forces = scale[:, np.newaxis] * r_diff
            out[i] += pair_forces.sum(axis=0)
            out[:i] -= pair_forces
        return out

    def compute_forces(self, state: BodyState, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Compute the net force on every body (single-threaded).

        Args:
            state: Body state
            out: Optional (n, 3) buffer to reuse; it is zeroed first

        Returns:
            Forces (n, 3)
        """
        n = state.n_bodies
        if out is None:
            out = np.zeros((n, 3), dtype=np.float64)
        else:
            out.fill(0.0)
        return self.accumulate_rows(state.positions, state.masses, 0, n, out)
