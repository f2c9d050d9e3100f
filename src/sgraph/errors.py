from typing import Optional


class SimulationError(Exception):
    """Base class for failures reported by a simulation control adapter."""


class StallTimeout(SimulationError):
    """No rising edge of a clock was observed within the allowed time."""

    def __init__(self, clock: str, timeout: float):
        super().__init__(f"No rising edge on {clock} within {timeout:g} ns")
        self.clock = clock
        self.timeout = timeout


class Unreadable(SimulationError):
    """A signal's value cannot be examined."""

    def __init__(self, signal: str, reason: str = "not readable"):
        super().__init__(f"{signal}: {reason}")
        self.signal = signal


class Unforceable(SimulationError):
    """A signal cannot be overridden with a forced value."""

    def __init__(self, signal: str, reason: str = "not forceable"):
        super().__init__(f"{signal}: {reason}")
        self.signal = signal


class CombinationalLoopError(SimulationError):
    """Combinational logic did not settle within the delta-cycle limit."""


class DomainAborted(Exception):
    """Analysis of a clock domain was abandoned before completion."""

    def __init__(self, clock: str, cause: Optional[BaseException] = None):
        message = f"Analysis of clock domain {clock} aborted"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
        self.clock = clock
        self.cause = cause


class ConfigError(ValueError):
    """Invalid analysis configuration."""
