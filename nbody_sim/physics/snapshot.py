"""Run parameters and periodic position snapshots."""

import math
import warnings
import numpy as np
from dataclasses import dataclass
from nbody_sim.errors import AllocationError, ParameterError


@dataclass(frozen=True)
class RunParameters:
    """Step and output counts derived once before a run starts."""
    time_step: float
    total_time: float
    outputs_per_body: int
    num_steps: int
    output_steps: int
    num_outputs: int

    @classmethod
    def derive(cls, time_step: float, total_time: float, outputs_per_body: int) -> "RunParameters":
        """Validate the user-facing values and derive the step counts.

        num_steps    = round(total_time / time_step)
        output_steps = max(1, num_steps // outputs_per_body)
        num_outputs  = ceil(num_steps / output_steps)

        Raises:
            ParameterError: On non-positive or inconsistent values
        """
        if not (math.isfinite(time_step) and math.isfinite(total_time)):
            raise ParameterError("time-step and total-time must be finite")
        if time_step <= 0 or total_time <= 0 or time_step > total_time:
            raise ParameterError(
                "time-step and total-time must be positive with time-step <= total-time"
            )
        if isinstance(outputs_per_body, bool) or int(outputs_per_body) != outputs_per_body:
            raise ParameterError(f"outputs-per-body must be an integer, got {outputs_per_body!r}")
        outputs_per_body = int(outputs_per_body)
        if outputs_per_body <= 0:
            raise ParameterError("outputs-per-body must be positive")

        num_steps = int(total_time / time_step + 0.5)
        if outputs_per_body > num_steps:
            warnings.warn(
                f"outputs-per-body ({outputs_per_body}) exceeds the number of steps "
                f"({num_steps}); recording every step"
            )
        output_steps = max(1, num_steps // outputs_per_body)
        num_outputs = (num_steps + output_steps - 1) // output_steps

        return cls(
            time_step=float(time_step),
            total_time=float(total_time),
            outputs_per_body=outputs_per_body,
            num_steps=num_steps,
            output_steps=output_steps,
            num_outputs=num_outputs,
        )

    @property
    def final_time(self) -> float:
        """Simulated time at the end of the run (steps 1 .. num_steps - 1)."""
        return (self.num_steps - 1) * self.time_step


class SnapshotRecorder:
    """Copies body positions into rows of the output trajectory matrix.

    Row 0 holds the initial positions. Step t is recorded into row
    ``t // output_steps`` when it lands on an output boundary, except for the
    last row, which is reserved for the final state written by ``finalize``.
    Every row is written once, in increasing order.
    """

    def __init__(self, params: RunParameters, n_bodies: int, output: np.ndarray = None):
        """Initialize recorder.

        Args:
            params: Derived run parameters
            n_bodies: Number of bodies
            output: Optional preallocated (num_outputs, 3n) matrix

        Raises:
            AllocationError: If the output matrix cannot be allocated
            ValueError: If ``output`` has the wrong shape
        """
        self.params = params
        self.n_bodies = n_bodies
        shape = (params.num_outputs, 3 * n_bodies)
        if output is None:
            from nbody_sim.io.matrix_io import create_matrix
            output = create_matrix(*shape)
        elif output.shape != shape:
            raise ValueError(f"output matrix must have shape {shape}, got {output.shape}")
        self.output = output
        self.rows_written = 0

    @property
    def last_row(self) -> int:
        return self.params.num_outputs - 1

    def _write_row(self, row: int, positions: np.ndarray):
        if row != self.rows_written:
            raise RuntimeError(f"output row {row} written out of order (expected {self.rows_written})")
        self.output[row] = positions.reshape(-1)
        self.rows_written += 1

    def record_initial(self, positions: np.ndarray):
        """Write the initial positions to row 0."""
        self._write_row(0, positions)

    def record_step(self, t: int, positions: np.ndarray) -> bool:
        """Record step ``t`` if it lands on an output boundary.

        Returns:
            True if a row was written
        """
        if t % self.params.output_steps != 0:
            return False
        row = t // self.params.output_steps
        # The last row belongs to finalize(), which writes the state after
        # step num_steps - 1 even when that step is not on a boundary
        if row >= self.last_row:
            return False
        self._write_row(row, positions)
        return True

    def finalize(self, positions: np.ndarray):
        """Write the final positions to the last row."""
        if self.last_row > 0:
            self._write_row(self.last_row, positions)

    @property
    def complete(self) -> bool:
        return self.rows_written == self.params.num_outputs
