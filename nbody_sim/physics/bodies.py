"""Body state: parallel mass, position and velocity arrays."""

import numpy as np
from typing import Tuple
from nbody_sim.errors import AllocationError, InputError

# Column layout of an input matrix row
INPUT_COLUMNS = 7
MASS_COLUMN = 0
POSITION_COLUMNS = slice(1, 4)
VELOCITY_COLUMNS = slice(4, 7)


class BodyState:
    """State of n point bodies.

    Masses are stored as a read-only (n,) array. Positions and velocities are
    (n, 3) float64 arrays mutated in place by the integrator; each row is one
    body, so ``positions.reshape(-1)`` is the concatenated (x, y, z) of all
    bodies in body order.
    """

    def __init__(self, masses, positions, velocities):
        """Initialize body state.

        Args:
            masses: Array-like of shape (n,) with positive masses (kg)
            positions: Array-like of shape (n, 3) (m)
            velocities: Array-like of shape (n, 3) (m/s)

        Raises:
            InputError: If shapes are inconsistent or masses are not positive
            AllocationError: If the arrays cannot be allocated
        """
        try:
            masses = np.array(masses, dtype=np.float64).reshape(-1)
            positions = np.array(positions, dtype=np.float64)
            velocities = np.array(velocities, dtype=np.float64)
        except MemoryError as exc:
            raise AllocationError(f"cannot allocate body arrays: {exc}") from exc

        n = masses.shape[0]
        if n == 0:
            raise InputError("at least one body is required")
        if positions.shape != (n, 3) or velocities.shape != (n, 3):
            raise InputError(
                f"positions and velocities must have shape ({n}, 3), "
                f"got {positions.shape} and {velocities.shape}"
            )
        if not np.all(np.isfinite(masses)) or np.any(masses <= 0):
            raise InputError("masses must be positive and finite")

        masses.flags.writeable = False
        self._masses = masses
        self.positions = positions
        self.velocities = velocities

    @classmethod
    def from_matrix(cls, matrix) -> "BodyState":
        """Build a body state from an n-by-7 matrix.

        Columns are ``[mass, x, y, z, vx, vy, vz]``.
        """
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.ndim != 2 or matrix.shape[1] != INPUT_COLUMNS:
            raise InputError(f"input must have {INPUT_COLUMNS} columns, got shape {matrix.shape}")
        if matrix.shape[0] == 0:
            raise InputError("input must have at least 1 row")
        return cls(
            matrix[:, MASS_COLUMN],
            matrix[:, POSITION_COLUMNS],
            matrix[:, VELOCITY_COLUMNS],
        )

    def to_matrix(self) -> np.ndarray:
        """Return the state as an n-by-7 matrix (inverse of ``from_matrix``)."""
        matrix = np.empty((self.n_bodies, INPUT_COLUMNS), dtype=np.float64)
        matrix[:, MASS_COLUMN] = self._masses
        matrix[:, POSITION_COLUMNS] = self.positions
        matrix[:, VELOCITY_COLUMNS] = self.velocities
        return matrix

    @property
    def n_bodies(self) -> int:
        return self._masses.shape[0]

    @property
    def masses(self) -> np.ndarray:
        return self._masses

    def __len__(self) -> int:
        return self.n_bodies

    def _check_index(self, i: int) -> int:
        if not 0 <= i < self.n_bodies:
            raise IndexError(f"body index {i} out of range for {self.n_bodies} bodies")
        return i

    def mass(self, i: int) -> float:
        return float(self._masses[self._check_index(i)])

    def position(self, i: int) -> np.ndarray:
        """Return a copy of the position of body ``i``."""
        return self.positions[self._check_index(i)].copy()

    def velocity(self, i: int) -> np.ndarray:
        """Return a copy of the velocity of body ``i``."""
        return self.velocities[self._check_index(i)].copy()

    def flat_positions(self) -> np.ndarray:
        """Positions as a 3n vector (view, no copy)."""
        return self.positions.reshape(-1)

    def copy(self) -> "BodyState":
        return BodyState(self._masses, self.positions, self.velocities)

    def get_state(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Get copies of (positions, velocities, masses)."""
        return self.positions.copy(), self.velocities.copy(), np.array(self._masses)
