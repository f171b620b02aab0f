from __future__ import annotations

from typing import Optional


class SchedulerError(Exception):
    """Base class for errors surfaced to the caller of the simulator."""


class InputFormatError(SchedulerError, ValueError):
    """A workload record could not be parsed."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class InputIOError(SchedulerError, OSError):
    """A workload file is missing or unreadable."""


class InvalidConfiguration(SchedulerError, ValueError):
    """A run parameter (count, quantum, algorithm, process set) was rejected."""
