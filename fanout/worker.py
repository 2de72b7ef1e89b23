# fanout/worker.py
import logging
import queue
import threading
from typing import Callable, Iterable, List, Optional

from .errors import JobError
from .executor import launch_command
from .models import Job, JobResult
from .utils import utcnow

log = logging.getLogger(__name__)

Launcher = Callable[[Job], JobResult]


def enqueue_jobs(jobs: Iterable[Job]) -> "queue.Queue[Job]":
    """Single producer: every job is queued before any worker starts."""
    q: "queue.Queue[Job]" = queue.Queue()
    for job in jobs:
        q.put(job)
    return q


def _failed(job: Job, error: Exception) -> JobResult:
    return JobResult(
        job=job,
        state="failed",
        error=str(error),
        error_kind=type(error).__name__,
        finished_at=utcnow(),
    )


def worker_loop(
    worker_id: str,
    jobs: "queue.Queue[Job]",
    results: "queue.Queue[JobResult]",
    shutdown: threading.Event,
    launcher: Launcher = launch_command,
) -> None:
    """
    Single worker thread loop:
      - takes jobs without blocking and exits once the queue is drained
      - a failing job is recorded and logged, then the loop moves on
      - stops taking new jobs once shutdown is set
    """
    log.debug("%s started", worker_id)
    while not shutdown.is_set():
        try:
            job = jobs.get_nowait()
        except queue.Empty:
            break

        try:
            result = launcher(job)
        except JobError as e:
            log.error("job %d (%s) failed: %s", job.index, job.line, e)
            result = _failed(job, e)
        except Exception as e:
            log.exception("job %d (%s) crashed", job.index, job.line)
            result = _failed(job, e)
        else:
            if result.returncode:
                log.warning("job %d (%s) exited with status %d", job.index, job.line, result.returncode)
            else:
                log.debug("%s finished job %d", worker_id, job.index)
        results.put(result)
    log.debug("%s exiting", worker_id)


def start_workers(
    jobs: Iterable[Job],
    count: int,
    launcher: Launcher = launch_command,
    shutdown: Optional[threading.Event] = None,
) -> List[JobResult]:
    """
    Queue all jobs, spawn `count` worker threads and join them.
    If Ctrl+C hits the driver, set shutdown so workers finish their current
    job and exit; running subprocesses are not killed.

    Returns results ordered by job index.
    """
    if count < 1:
        raise ValueError(f"worker count must be positive, got {count}")

    job_queue = enqueue_jobs(jobs)
    results: "queue.Queue[JobResult]" = queue.Queue()
    shutdown = shutdown or threading.Event()

    threads = []
    for n in range(count):
        t = threading.Thread(
            target=worker_loop,
            args=(f"w-{n}", job_queue, results, shutdown, launcher),
            name=f"fanout-w-{n}",
            daemon=False,
        )
        t.start()
        threads.append(t)

    try:
        for t in threads:
            t.join()
    except KeyboardInterrupt:
        log.warning("interrupted, waiting for running jobs to finish")
        shutdown.set()
        for t in threads:
            t.join()
        raise

    collected = []
    while True:
        try:
            collected.append(results.get_nowait())
        except queue.Empty:
            break
    return sorted(collected, key=lambda r: r.job.index)
