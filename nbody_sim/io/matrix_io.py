"""Dense matrix files (.npy) for simulation input and output."""

import os
import numpy as np
from pathlib import Path
from nbody_sim.errors import AllocationError, InputError, OutputError
from nbody_sim.physics.bodies import BodyState


def read_matrix(path) -> np.ndarray:
    """Read a 2-D float64 matrix from a .npy file.

    A 1-D array is read as a single row.

    Raises:
        InputError: If the file cannot be read or does not hold a numeric matrix
    """
    try:
        data = np.load(path, allow_pickle=False)
    except (OSError, ValueError, EOFError) as exc:
        raise InputError(f"error reading input {path}: {exc}") from exc
    if not isinstance(data, np.ndarray):
        # .npz archives load as a mapping
        data.close()
        raise InputError(f"{path} does not hold a single matrix")
    if data.ndim == 1:
        data = data.reshape(1, -1)
    if data.ndim != 2:
        raise InputError(f"{path} must hold a 2-D matrix, got {data.ndim} dimensions")
    try:
        return data.astype(np.float64, copy=False)
    except (TypeError, ValueError) as exc:
        raise InputError(f"{path} does not hold numeric data: {exc}") from exc


def create_matrix(rows: int, cols: int) -> np.ndarray:
    """Allocate a zero-filled (rows, cols) float64 matrix.

    Raises:
        AllocationError: If the shape is invalid or memory is exhausted
    """
    if rows <= 0 or cols <= 0:
        raise AllocationError(f"invalid matrix shape ({rows}, {cols})")
    try:
        return np.zeros((rows, cols), dtype=np.float64)
    except (MemoryError, ValueError) as exc:
        raise AllocationError(f"error allocating {rows}x{cols} matrix: {exc}") from exc


def write_matrix(path, matrix: np.ndarray):
    """Write a matrix to ``path`` in .npy format (no suffix is appended).

    The data goes to a temporary file in the same directory, which then
    replaces ``path``, so a failed write leaves no partial file behind.

    Raises:
        OutputError: If the file cannot be written
    """
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "wb") as f:
            np.save(f, np.asarray(matrix, dtype=np.float64), allow_pickle=False)
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path.exists():
            tmp_path.unlink()
        raise OutputError(f"error writing output {path}: {exc}") from exc


def load_bodies(path) -> BodyState:
    """Load the initial body state.

    ``.npz`` and ``.json`` files are read as saved states; anything else as
    an n-by-7 matrix ``[mass, x, y, z, vx, vy, vz]``.

    Raises:
        InputError: On unreadable files, wrong column count, zero rows or
            invalid masses
    """
    suffix = Path(path).suffix
    if suffix in (".npz", ".json"):
        from nbody_sim.io.state_io import load_state
        state, _ = load_state(path)
        return state
    return BodyState.from_matrix(read_matrix(path))
