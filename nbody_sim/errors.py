"""Exception types raised by the simulator and its I/O layer."""


class NBodyError(Exception):
    """Base class for all errors that abort a simulation run."""


class ParameterError(NBodyError, ValueError):
    """Invalid or inconsistent run parameters (time step, outputs, threads)."""


class InputError(NBodyError, ValueError):
    """Unreadable or malformed input matrix."""


class AllocationError(NBodyError, MemoryError):
    """Body arrays or the output buffer could not be allocated."""


class OutputError(NBodyError, OSError):
    """The output matrix could not be written."""
