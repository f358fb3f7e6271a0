"""Static trajectory plots of simulation output using matplotlib."""

import argparse
import sys
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from typing import Optional, Tuple
from nbody_sim.errors import NBodyError
from nbody_sim.io.matrix_io import read_matrix


def split_trajectories(output: np.ndarray) -> np.ndarray:
    """Reshape a (num_outputs, 3n) output matrix to (n, num_outputs, 3)."""
    output = np.asarray(output)
    if output.ndim != 2 or output.shape[1] % 3 != 0:
        raise ValueError(f"output matrix must have 3n columns, got shape {output.shape}")
    n = output.shape[1] // 3
    return output.reshape(output.shape[0], n, 3).transpose(1, 0, 2)


class TrajectoryPlot:
    """X-Y projection of body trajectories."""
    
    def __init__(
        self,
        figsize: Tuple[int, int] = (8, 8),
        dpi: int = 100,
        max_bodies: Optional[int] = None,
        show_start: bool = True
    ):
        """Initialize plot.
        
        Args:
            figsize: Figure size (width, height)
            dpi: Dots per inch
            max_bodies: Only draw the first ``max_bodies`` bodies
            show_start: Mark initial positions
        """
        self.figsize = figsize
        self.dpi = dpi
        self.max_bodies = max_bodies
        self.show_start = show_start
        self.fig: Optional[Figure] = None
        self.ax = None
    
    def plot(self, output: np.ndarray) -> Figure:
        """Draw every body's trajectory from an output matrix."""
        trajectories = split_trajectories(output)
        if self.max_bodies is not None:
            trajectories = trajectories[:self.max_bodies]
        
        self.fig, self.ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)
        self.ax.set_aspect('equal')
        self.ax.set_xlabel('X (m)')
        self.ax.set_ylabel('Y (m)')
        self.ax.set_title(f'N-body trajectories ({trajectories.shape[0]} bodies)')
        self.ax.grid(True, alpha=0.3)
        
        for track in trajectories:
            line, = self.ax.plot(track[:, 0], track[:, 1], linewidth=0.8)
            if self.show_start:
                self.ax.scatter(track[0, 0], track[0, 1], s=12, color=line.get_color())
        return self.fig
    
    def save(self, path: str):
        if self.fig is None:
            raise RuntimeError("Nothing plotted. Call plot() first.")
        self.fig.savefig(path)
    
    def close(self):
        if self.fig is not None:
            plt.close(self.fig)
            self.fig = None
            self.ax = None


def main(argv=None) -> int:
    """Plot an output matrix written by nbody-sim."""
    parser = argparse.ArgumentParser(prog="nbody-plot", description="Plot N-body trajectories")
    parser.add_argument('output_file', metavar='output-file', help='Output .npy matrix from nbody-sim')
    parser.add_argument('--bodies', type=int, default=None, help='Only plot the first N bodies')
    parser.add_argument('--save', type=str, default=None, help='Save the figure instead of showing it')
    args = parser.parse_args(argv)
    
    try:
        output = read_matrix(args.output_file)
        plot = TrajectoryPlot(max_bodies=args.bodies)
        plot.plot(output)
    except (NBodyError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    
    if args.save:
        plot.save(args.save)
        print(f"Figure saved to {args.save}")
    else:
        plt.show()
    plot.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
