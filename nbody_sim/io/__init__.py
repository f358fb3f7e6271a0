"""I/O utilities for matrices and body states."""

from nbody_sim.io.matrix_io import read_matrix, create_matrix, write_matrix, load_bodies
from nbody_sim.io.state_io import save_state, load_state

__all__ = ["read_matrix", "create_matrix", "write_matrix", "load_bodies", "save_state", "load_state"]
