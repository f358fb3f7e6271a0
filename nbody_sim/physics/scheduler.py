"""Fork-join scheduling of the force and integration phases over threads.

A fixed pool of worker threads lives for one run. Each step has two phases
separated by barriers:

1. Forces: workers pull chunks of rows from a shared dispenser and accumulate
   pair forces into thread-private buffers. The barrier action sums the
   private buffers into the shared force array.
2. Integration: workers pull chunks of bodies and integrate them in place.
   The barrier action runs the per-step callback (snapshots, hooks) in
   exactly one thread.

numpy releases the GIL inside its array kernels, so the per-row work of
different threads overlaps.
"""

import threading
import numpy as np
from typing import Callable, List, Optional
from nbody_sim.errors import AllocationError
from nbody_sim.physics.bodies import BodyState
from nbody_sim.physics.force_calculator import ForceCalculator
from nbody_sim.physics.integrators.base import Integrator

DEFAULT_CHUNK_SIZE = 16


class ChunkDispenser:
    """Hands out ``[start, stop)`` index ranges to competing workers.

    With ``descending=True`` ranges are dispensed from the top of the index
    space down, so the heaviest rows of the triangular force loop go first.
    """

    def __init__(self, total: int, chunk_size: int, descending: bool = False):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.total = total
        self.chunk_size = chunk_size
        self.descending = descending
        self._next = 0
        self._lock = threading.Lock()

    def reset(self):
        with self._lock:
            self._next = 0

    def next_chunk(self):
        """Return the next range, or None when the space is exhausted."""
        with self._lock:
            if self._next >= self.total:
                return None
            begin = self._next
            self._next = min(self.total, begin + self.chunk_size)
            end = self._next
        if self.descending:
            return self.total - end, self.total - begin
        return begin, end


class ParallelStepScheduler:
    """Runs simulation steps on a fixed pool of worker threads."""

    def __init__(
        self,
        calculator: ForceCalculator,
        integrator: Integrator,
        num_threads: int = 1,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize scheduler.

        Args:
            calculator: Force calculator (holds G and softening)
            integrator: Integrator applied per body range
            num_threads: Number of worker threads (clamped to the body count at run time)
            chunk_size: Rows/bodies handed to a worker at a time
        """
        if num_threads <= 0:
            raise ValueError(f"num_threads must be positive, got {num_threads}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.calculator = calculator
        self.integrator = integrator
        self.num_threads = num_threads
        self.chunk_size = chunk_size

        # Per-run state
        self.forces: Optional[np.ndarray] = None
        self._local_forces: List[np.ndarray] = []
        self._errors: List[BaseException] = []
        self._errors_lock = threading.Lock()

    def run(
        self,
        state: BodyState,
        dt: float,
        first_step: int,
        stop_step: int,
        on_step: Optional[Callable[[int], None]] = None,
    ):
        """Run steps ``first_step .. stop_step - 1``.

        Args:
            state: Body state, mutated in place
            dt: Time step
            first_step: Index of the first step
            stop_step: One past the index of the last step
            on_step: Called with the step index after each integration
                barrier, from exactly one thread

        Raises:
            AllocationError: If force buffers cannot be allocated
            Exception: The first error raised by any worker or by ``on_step``
        """
        if stop_step <= first_step:
            return
        n = state.n_bodies
        num_threads = min(self.num_threads, n)

        try:
            self.forces = np.zeros((n, 3), dtype=np.float64)
            self._local_forces = [np.zeros((n, 3), dtype=np.float64) for _ in range(num_threads)]
        except MemoryError as exc:
            raise AllocationError(f"cannot allocate force buffers: {exc}") from exc
        self._errors = []

        force_rows = ChunkDispenser(n, self.chunk_size, descending=True)
        bodies = ChunkDispenser(n, self.chunk_size)
        step_box = [first_step]

        def reduce_forces():
            np.sum(self._local_forces, axis=0, out=self.forces)
            force_rows.reset()

        def finish_step():
            bodies.reset()
            if on_step is not None:
                on_step(step_box[0])
            step_box[0] += 1

        force_barrier = threading.Barrier(num_threads, action=reduce_forces)
        step_barrier = threading.Barrier(num_threads, action=finish_step)

        def worker(index: int):
            local = self._local_forces[index]
            positions = state.positions
            masses = state.masses
            try:
                for _ in range(first_step, stop_step):
                    local.fill(0.0)
                    chunk = force_rows.next_chunk()
                    while chunk is not None:
                        self.calculator.accumulate_rows(positions, masses, chunk[0], chunk[1], local)
                        chunk = force_rows.next_chunk()
                    force_barrier.wait()

                    chunk = bodies.next_chunk()
                    while chunk is not None:
                        self.integrator.step(state, self.forces, dt, chunk[0], chunk[1])
                        chunk = bodies.next_chunk()
                    step_barrier.wait()
            except threading.BrokenBarrierError:
                # Another worker failed; its error is reported instead
                pass
            except BaseException as exc:
                with self._errors_lock:
                    self._errors.append(exc)
                force_barrier.abort()
                step_barrier.abort()

        threads = [
            threading.Thread(target=worker, args=(k,), name=f"nbody-worker-{k}", daemon=True)
            for k in range(1, num_threads)
        ]
        for thread in threads:
            thread.start()
        # The calling thread is worker 0
        worker(0)
        for thread in threads:
            thread.join()

        self._local_forces = []
        if self._errors:
            raise self._errors[0]
