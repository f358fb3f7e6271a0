"""Main simulator controller."""

import enum
import time
import warnings
import numpy as np
from typing import Callable, Optional
from nbody_sim.physics.bodies import BodyState
from nbody_sim.physics.force_calculator import ForceCalculator
from nbody_sim.physics.integrators.base import Integrator
from nbody_sim.physics.integrators.euler import SemiImplicitEulerIntegrator
from nbody_sim.physics.scheduler import DEFAULT_CHUNK_SIZE, ParallelStepScheduler
from nbody_sim.physics.snapshot import RunParameters, SnapshotRecorder


class SimulationState(enum.Enum):
    INITIALIZED = "initialized"
    STEPPING = "stepping"
    FINALIZING = "finalizing"
    DONE = "done"


class Simulator:
    """Main simulation controller.

    Orchestrates the force calculator, integrator, scheduler and snapshot
    recorder through one run:

    INITIALIZED -> STEPPING (t = 1 .. num_steps - 1) -> FINALIZING -> DONE
    """

    def __init__(
        self,
        state: BodyState,
        params: RunParameters,
        calculator: Optional[ForceCalculator] = None,
        integrator: Optional[Integrator] = None,
        num_threads: int = 1,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        output: Optional[np.ndarray] = None,
    ):
        """Initialize simulator.

        Args:
            state: Initial body state (mutated in place by the run)
            params: Derived run parameters
            calculator: Force calculator (default: SI constants)
            integrator: Integrator to use (default: semi-implicit Euler)
            num_threads: Worker threads, clamped to the number of bodies
            chunk_size: Scheduler chunk size
            output: Optional preallocated (num_outputs, 3n) output matrix
        """
        self.system = state
        self.params = params
        self.calculator = calculator or ForceCalculator()
        self.integrator = integrator or SemiImplicitEulerIntegrator()

        if num_threads > state.n_bodies:
            warnings.warn(
                f"num_threads ({num_threads}) exceeds the number of bodies "
                f"({state.n_bodies}); using {state.n_bodies}"
            )
            num_threads = state.n_bodies
        self.num_threads = num_threads
        self.scheduler = ParallelStepScheduler(
            self.calculator, self.integrator, num_threads=num_threads, chunk_size=chunk_size
        )
        self.recorder = SnapshotRecorder(params, state.n_bodies, output=output)

        self.state = SimulationState.INITIALIZED
        self.step_count = 0

        # Profiling: stepping region timing (ms)
        self._profile: bool = False
        self._last_run_ms: Optional[float] = None

        # Called as on_step_callback(simulator, step) once per step, outside the hot loop
        self.on_step_callback: Optional[Callable] = None

    @property
    def time(self) -> float:
        return self.step_count * self.params.time_step

    @property
    def output(self) -> np.ndarray:
        return self.recorder.output

    def set_profiling(self, enabled: bool = True):
        """Enable or disable timing of the stepping region."""
        self._profile = enabled

    def get_timing(self) -> dict:
        """Return timing of the last run in ms: total and per step."""
        steps = self.step_count
        per_step = None
        if self._last_run_ms is not None and steps > 0:
            per_step = self._last_run_ms / steps
        return {"run_ms": self._last_run_ms, "step_ms": per_step}

    def _on_step(self, t: int):
        self.step_count = t
        self.recorder.record_step(t, self.system.positions)
        if self.on_step_callback:
            self.on_step_callback(self, t)

    def run(self) -> np.ndarray:
        """Run the whole simulation.

        Returns:
            Output matrix (num_outputs, 3n); row 0 holds the initial
            positions and the last row the final positions
        """
        if self.state is not SimulationState.INITIALIZED:
            raise RuntimeError(f"simulator already ran (state: {self.state.value})")

        self.recorder.record_initial(self.system.positions)

        self.state = SimulationState.STEPPING
        if self._profile:
            t0 = time.perf_counter()
        self.scheduler.run(
            self.system,
            self.params.time_step,
            first_step=1,
            stop_step=self.params.num_steps,
            on_step=self._on_step,
        )
        if self._profile:
            self._last_run_ms = (time.perf_counter() - t0) * 1000.0

        self.state = SimulationState.FINALIZING
        self.recorder.finalize(self.system.positions)

        self.state = SimulationState.DONE
        return self.recorder.output

    def get_state(self):
        """Get current simulation state.

        Returns:
            Tuple of (positions, velocities, masses, time, step_count)
        """
        pos, vel, mass = self.system.get_state()
        return pos, vel, mass, self.time, self.step_count
