"""Earth-Moon example: build an input matrix and run it through the simulator."""

import numpy as np
from nbody_sim import BodyState, RunParameters, Simulator
from nbody_sim.io.matrix_io import write_matrix
from nbody_sim.physics.diagnostics import Diagnostics


def main():
    """Simulate 28 days of the Earth-Moon system."""
    # Rows: [mass, x, y, z, vx, vy, vz]
    bodies = np.array([
        [5.97e24, 0.0, 0.0, 0.0, 0.0, -12.5, 0.0],
        [7.35e22, 3.844e8, 0.0, 0.0, 0.0, 1012.0, 0.0],
    ])
    write_matrix("earth_moon_input.npy", bodies)

    state = BodyState.from_matrix(bodies)
    params = RunParameters.derive(time_step=60.0, total_time=28 * 86400.0, outputs_per_body=28)
    diagnostics = Diagnostics()
    _, _, E0 = diagnostics.compute_energies(state)

    sim = Simulator(state, params, num_threads=2)

    def on_step(sim, step):
        if step % 7200 == 0:
            _, _, energy = diagnostics.compute_energies(sim.system)
            print(f"Step {step}: Time={sim.time / 86400.0:.1f} d, Energy={energy:.6e}")

    sim.on_step_callback = on_step

    print("Running simulation...")
    print(f"Initial energy: {E0:.6e}")
    output = sim.run()
    write_matrix("earth_moon_output.npy", output)

    print(f"Output matrix: {output.shape[0]} rows x {output.shape[1]} columns")
    print("Simulation complete!")


if __name__ == "__main__":
    main()
