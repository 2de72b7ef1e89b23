import os
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import DEFAULTS

THREADS_ENV = "FANOUT_THREADS"


def default_threads() -> int:
    """
    Worker count used when --threads is not given.

    FANOUT_THREADS wins when set; otherwise one worker per available CPU.
    """
    raw = os.environ.get(THREADS_ENV)
    if raw:
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"{THREADS_ENV} must be an integer, got {raw!r}")
        if value < 1:
            raise ValueError(f"{THREADS_ENV} must be positive, got {value}")
        return value
    return os.cpu_count() or 1


class RunConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_file: Path
    command: Tuple[str, ...] = Field(min_length=1)
    output_dir: Path = Path(DEFAULTS["output_dir"])
    record_output: bool = True
    threads: int = Field(default_factory=default_threads, gt=0)
    clobber: bool = False
    prefix: Optional[str] = None
    placeholder: str = Field(default=DEFAULTS["placeholder"], min_length=1)

    @field_validator("command")
    @classmethod
    def _executable_not_blank(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if not v[0].strip():
            raise ValueError("command must start with an executable name")
        return v

    @property
    def executable(self) -> str:
        return self.command[0]

    @property
    def template(self) -> Tuple[str, ...]:
        return self.command[1:]
