# mcspice/utils/errors.py
from __future__ import annotations


class SimulationError(RuntimeError):
    """
    Base class of every domain error raised by a run.

    Runners re-raise these unchanged; anything else is wrapped once
    into RunFailed.
    """


class NotFound(SimulationError):
    """A required file (netlist, netlist body) does not exist."""

    def __init__(self, path, message: str | None = None):
        self.path = str(path)
        super().__init__(message or f"file not found: {self.path}")


class EmptyContent(SimulationError):
    """A required file exists but holds nothing usable."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"file can not be empty: {self.path}")


class EnvironmentSetupFailed(SimulationError):
    """Directory or symbolic link creation failed."""


class NonZeroExit(SimulationError):
    def __init__(self, exit_code: int, command: str = ""):
        self.exit_code = exit_code
        self.command = command
        super().__init__(f"command exited with code {exit_code}: {command}")


class IncompleteResults(SimulationError):
    def __init__(self, expected: int, actual: int, pattern: str = ""):
        self.expected = expected
        self.actual = actual
        self.pattern = pattern
        super().__init__(
            f"not enough simulation result files({pattern}): "
            f"expected={expected} found={actual}"
        )


class Cancelled(SimulationError):
    """Run stopped because its cancel token was triggered."""


class RunFailed(SimulationError):
    """
    Catch-all for unexpected failures during a run.
    The original error text is kept in `cause`.
    """

    def __init__(self, cause: str):
        self.cause = cause
        super().__init__(f"unknown error has occurred\n\t--> {cause}")


class InvalidRequest(SimulationError):
    """Request lacks fields that the selected profile needs."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"request is missing fields: {', '.join(self.missing)}")


class SiPrefixError(ValueError):
    """Token is not an SI-prefixed decimal."""
