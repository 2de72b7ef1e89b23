import logging
import os
import subprocess
import sys

from .errors import CaptureIOError, ClobberRefused, SpawnFailure
from .models import Job, JobResult
from .utils import utcnow

log = logging.getLogger(__name__)


def _reserve_output(job: Job):
    """
    Create stdout_file exclusively before the command runs.

    Of several jobs racing for the same path only one gets the handle; the
    rest are refused without executing anything. An existing stderr_file
    refuses the job too.
    """
    if job.stderr_file.exists():
        raise ClobberRefused(
            f"{job.stderr_file} already exists (pass --clobber to overwrite)", job=job
        )
    try:
        return open(job.stdout_file, "xb")
    except FileExistsError:
        raise ClobberRefused(
            f"{job.stdout_file} already exists (pass --clobber to overwrite)", job=job
        ) from None
    except (OSError, ValueError) as e:
        raise CaptureIOError(f"Cannot create {job.stdout_file}: {e}", job=job) from e


def _discard(path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def _mirror(stream, data: bytes) -> None:
    if not data:
        return
    stream.flush()
    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        stream.write(data.decode("utf-8", errors="replace"))
        stream.flush()
    else:
        buffer.write(data)
        buffer.flush()


def _record(job: Job, out: bytes, err: bytes, reserved) -> None:
    try:
        if reserved is not None:
            reserved.write(out)
            reserved.close()
        else:
            job.stdout_file.write_bytes(out)
        if err:
            with open(job.stderr_file, "wb" if job.clobber else "xb") as f:
                f.write(err)
        elif job.clobber:
            _discard(job.stderr_file)
    except (OSError, ValueError) as e:
        raise CaptureIOError(f"Cannot write output for {job.stdout_file}: {e}", job=job) from e


def launch_command(job: Job) -> JobResult:
    """
    Run one job to completion.

    stdout/stderr are captured after the process exits, echoed to our own
    stdout/stderr, then written to job.stdout_file (and job.stderr_file when
    the command wrote to stderr) if recording is on. A non-zero exit status
    is reported in the result, not raised.
    """
    started_at = utcnow()
    reserved = _reserve_output(job) if job.record_output and not job.clobber else None

    log.debug("job %d: exec %s", job.index, job.argv)
    try:
        proc = subprocess.run(job.argv, capture_output=True)
    except (OSError, ValueError) as e:
        if reserved is not None:
            reserved.close()
            _discard(job.stdout_file)
        raise SpawnFailure(f"Cannot start {job.command!r}: {e}", job=job) from e

    try:
        try:
            _mirror(sys.stdout, proc.stdout)
            _mirror(sys.stderr, proc.stderr)
        except OSError as e:
            raise CaptureIOError(f"Cannot echo output to console: {e}", job=job) from e
        if job.record_output:
            _record(job, proc.stdout, proc.stderr, reserved)
    except CaptureIOError:
        if reserved is not None:
            reserved.close()
            _discard(job.stdout_file)
        raise
    finally:
        if reserved is not None and not reserved.closed:
            reserved.close()

    return JobResult(
        job=job,
        returncode=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
        started_at=started_at,
        finished_at=utcnow(),
    )
