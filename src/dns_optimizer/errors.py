"""
Error taxonomy for DNS Optimizer.

Fatal errors (ReadFailed, ApplyFailed) stop the pipeline. Probe errors
are absorbed by the prober and surface only as a ProbeOutcome status.
"""

from typing import Optional


class OptimizerError(Exception):
    """Base class for all DNS Optimizer errors."""


class CommandUnavailable(OptimizerError):
    """A required external tool is missing."""

    def __init__(self, command: str, message: Optional[str] = None):
        self.command = command
        super().__init__(message or f"Required command not found: {command}")


class CommandTimeout(OptimizerError):
    """An external command exceeded its time limit."""

    def __init__(self, command: str, timeout: float):
        self.command = command
        self.timeout = timeout
        super().__init__(f"{command} timed out after {timeout}s")


class ReadFailed(OptimizerError):
    """The current resolver configuration could not be read or parsed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ApplyFailed(OptimizerError):
    """A resolver configuration change could not be applied.

    ``address`` is None when the failed change was a reset to automatic.
    """

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.address = address
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ProbeError(OptimizerError):
    """A single candidate could not be measured."""


class ProbeUnreachable(ProbeError):
    """The candidate answered none of the echo requests."""


class ProbeTimeout(ProbeError):
    """The probe exceeded its per-probe time limit."""


class NoReachableResolver(OptimizerError):
    """Every candidate failed its probe."""

    def __init__(self, attempted: int):
        self.attempted = attempted
        super().__init__(f"None of {attempted} resolvers were reachable")
