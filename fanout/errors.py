"""Error taxonomy.

``InputReadError`` is fatal and stops the run before any job is dispatched.
Everything deriving from ``JobError`` is local to a single job: the worker
records it and moves on to the next one.
"""

from .models import Job


class FanoutError(Exception):
    """Base class for fanout errors."""


class InputReadError(FanoutError, OSError):
    """The input file is missing, unreadable or not valid UTF-8."""

    def __init__(self, message: str, *, path) -> None:
        super().__init__(message)
        self.path = path


class JobError(FanoutError):
    """A single job failed; sibling jobs are unaffected."""

    def __init__(self, message: str, *, job: Job) -> None:
        super().__init__(message)
        self.job = job


class ClobberRefused(JobError):
    """Output file already exists and clobbering is disabled."""


class SpawnFailure(JobError):
    """The subprocess could not be started."""


class CaptureIOError(JobError):
    """Captured output could not be written to disk."""
