"""CLI main entry point."""

import argparse
import sys
import time
import warnings
import numpy as np
from pathlib import Path
from nbody_sim.errors import NBodyError, ParameterError
from nbody_sim.io.matrix_io import load_bodies, write_matrix
from nbody_sim.io.state_io import STATE_SUFFIXES, save_state
from nbody_sim.physics.diagnostics import Diagnostics
from nbody_sim.physics.force_calculator import ForceCalculator
from nbody_sim.physics.simulator import Simulator
from nbody_sim.physics.snapshot import RunParameters
from nbody_sim.utils.config import Config, load_config
from nbody_sim.utils.threads import default_num_threads


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _show_warning(message, category, filename, lineno, file=None, line=None):
    print(f"warning: {message}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="nbody-sim",
        description="Brute-force gravitational N-body simulation",
    )
    parser.add_argument('time_step', metavar='time-step', type=float,
                        help='Time between steps (seconds)')
    parser.add_argument('total_time', metavar='total-time', type=float,
                        help='Total simulated time (seconds)')
    parser.add_argument('outputs_per_body', metavar='outputs-per-body', type=int,
                        help='Number of positions to output per body')
    parser.add_argument('input_file', metavar='input-file',
                        help='n-by-7 .npy matrix [mass, x, y, z, vx, vy, vz] (or a saved .npz/.json state)')
    parser.add_argument('output_file', metavar='output-file',
                        help='Output .npy matrix (outputs x 3n)')
    parser.add_argument('num_threads', metavar='num-threads', type=int, nargs='?', default=None,
                        help='Number of threads (default: half the available cores)')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON or YAML run configuration (physics constants, threads, chunk size)')
    parser.add_argument('--save-state', type=str, default=None,
                        help='Save final body state to file (.npz or .json)')
    parser.add_argument('--report', action='store_true',
                        help='Print momentum and energy drift after the run')
    return parser


def run_simulation(args) -> int:
    """Run a simulation from parsed arguments."""
    config = load_config(args.config) if args.config else Config()

    if args.save_state and Path(args.save_state).suffix not in STATE_SUFFIXES:
        raise ParameterError(
            f"--save-state must end in {' or '.join(STATE_SUFFIXES)}, got {args.save_state}"
        )

    params = RunParameters.derive(args.time_step, args.total_time, args.outputs_per_body)

    num_threads = args.num_threads
    if num_threads is None:
        num_threads = config.num_threads or default_num_threads()
    if num_threads <= 0:
        raise ParameterError("num-threads must be positive")

    state = load_bodies(args.input_file)
    initial = state.copy() if (args.report or config.report) else None
    num_threads = min(num_threads, state.n_bodies)

    print(f"Running simulation: {state.n_bodies} bodies, {params.num_steps} steps, "
          f"{params.num_outputs} outputs, {num_threads} threads")

    start = time.perf_counter()
    calculator = ForceCalculator(G=config.gravitational_constant, softening=config.softening)
    sim = Simulator(
        state,
        params,
        calculator=calculator,
        num_threads=num_threads,
        chunk_size=config.chunk_size,
    )
    output = sim.run()
    elapsed = time.perf_counter() - start
    print(f"{elapsed:f} secs")

    write_matrix(args.output_file, output)

    if args.save_state:
        save_state(state, args.save_state, metadata={
            'time': params.final_time,
            'steps': sim.step_count,
            'time_step': params.time_step,
        })
        print(f"State saved to {args.save_state}")

    if initial is not None:
        diagnostics = Diagnostics(G=config.gravitational_constant, softening=config.softening)
        report = diagnostics.report(initial, state)
        print(f"{'Quantity':<12} {'Initial':<14} {'Final':<14} {'Drift':<12}")
        print("-" * 54)
        p0 = float(np.linalg.norm(report['momentum_initial']))
        p1 = float(np.linalg.norm(report['momentum_final']))
        print(f"{'|p|':<12} {p0:<14.6e} {p1:<14.6e} {report['momentum_drift']:<12.3e}")
        print(f"{'E':<12} {report['energy_initial']:<14.6e} {report['energy_final']:<14.6e} "
              f"{report['energy_relative_drift'] * 100:<11.4f}%")

    return 0


def main(argv=None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    with warnings.catch_warnings():
        warnings.showwarning = _show_warning
        try:
            return run_simulation(args)
        except (NBodyError, OSError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1


if __name__ == '__main__':
    sys.exit(main())
