"""Utility functions for configuration and threading defaults."""

from nbody_sim.utils.config import load_config, save_config, Config
from nbody_sim.utils.threads import available_cores, default_num_threads

__all__ = ["load_config", "save_config", "Config", "available_cores", "default_num_threads"]
