"""Trajectory plotting."""

from nbody_sim.render.trajectory_plot import TrajectoryPlot, split_trajectories

__all__ = ["TrajectoryPlot", "split_trajectories"]
