from pathlib import Path
from typing import Optional, Tuple
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .utils import utcnow


class Job(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: str = Field(min_length=1)
    arguments: Tuple[str, ...] = ()
    stdout_file: Path              # built eagerly, only opened when record_output is set
    clobber: bool = False
    record_output: bool = True
    index: int = 0
    line: str = ""

    @property
    def stderr_file(self) -> Path:
        return self.stdout_file.with_suffix(".stderr")

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.arguments]


class JobResult(BaseModel):
    job: Job
    state: str = Field(default="completed")  # completed | failed
    returncode: Optional[int] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    stdout: bytes = b""
    stderr: bytes = b""
    started_at: datetime = Field(default_factory=utcnow)
    finished_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.state == "completed" and self.returncode == 0

DEFAULTS = {
    "placeholder": "%INPUT%",
    "output_dir": ".",
}
