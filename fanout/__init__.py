"""fanout - run one command template per input line across a thread pool."""

from .models import Job, JobResult
from .errors import (
    FanoutError, InputReadError, JobError, ClobberRefused, SpawnFailure, CaptureIOError
)

__all__ = [
    "Job", "JobResult",
    "FanoutError", "InputReadError", "JobError", "ClobberRefused", "SpawnFailure", "CaptureIOError",
]
