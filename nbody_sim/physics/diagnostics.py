"""Diagnostics for N-body simulations."""

import numpy as np
from typing import Tuple
from nbody_sim.physics.bodies import BodyState
from nbody_sim.physics.force_calculator import GRAVITATIONAL_CONSTANT, SOFTENING


class Diagnostics:
    """Conserved quantities matching the force law."""

    def __init__(self, G: float = GRAVITATIONAL_CONSTANT, softening: float = SOFTENING):
        """Initialize diagnostics.

        Args:
            G: Gravitational constant
            softening: Softening added to squared distances (must match force calculation)
        """
        self.G = G
        self.softening = softening

    def compute_momentum(self, state: BodyState) -> np.ndarray:
        """Total linear momentum: Σ m_i * v_i."""
        return np.sum(state.masses[:, np.newaxis] * state.velocities, axis=0)

    def compute_center_of_mass(self, state: BodyState) -> np.ndarray:
        masses = state.masses
        return np.sum(masses[:, np.newaxis] * state.positions, axis=0) / np.sum(masses)

    def compute_energies(self, state: BodyState) -> Tuple[float, float, float]:
        """Compute kinetic, potential, and total energy.

        Potential uses the same softening as the force law:
        U = -G * Σ_{i<j} m_i * m_j / sqrt(r_ij^2 + eps)

        Returns:
            Tuple of (kinetic_energy, potential_energy, total_energy)
        """
        masses = state.masses
        positions = state.positions

        # Kinetic energy: K = 0.5 * Σ m_i * v_i^2
        v_sq = np.sum(state.velocities ** 2, axis=1)
        K = 0.5 * float(np.sum(masses * v_sq))

        U = 0.0
        for i in range(1, state.n_bodies):
            r_diff = positions[:i] - positions[i]
            r_soft = np.sqrt(np.sum(r_diff ** 2, axis=1) + self.softening)
            U -= self.G * masses[i] * float(np.sum(masses[:i] / r_soft))

        return K, U, K + U

    def report(self, initial: BodyState, final: BodyState) -> dict:
        """Compare conserved quantities between two states of the same system."""
        p0 = self.compute_momentum(initial)
        p1 = self.compute_momentum(final)
        _, _, E0 = self.compute_energies(initial)
        _, _, E1 = self.compute_energies(final)
        dE = (E1 - E0) / abs(E0) if E0 != 0 else 0.0
        return {
            "momentum_initial": p0,
            "momentum_final": p1,
            "momentum_drift": float(np.linalg.norm(p1 - p0)),
            "energy_initial": E0,
            "energy_final": E1,
            "energy_relative_drift": dE,
        }
