"""Thread-count defaults."""

import os


def available_cores() -> int:
    """Number of CPUs this process may run on."""
    try:
        return len(os.sched_getaffinity(0))
    except AttributeError:
        return os.cpu_count() or 1


def default_num_threads() -> int:
    """Half the available cores (at least one)."""
    return max(1, available_cores() // 2)
