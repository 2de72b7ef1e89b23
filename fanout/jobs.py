import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import RunConfig
from .errors import InputReadError
from .models import Job, DEFAULTS


def load_lines(path) -> List[str]:
    """
    Read the input file into trimmed lines, keeping blank lines as "".
    Raises InputReadError if the file can't be opened, read or decoded.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputReadError(f"Cannot read input file {path}: {e}", path=path) from e

    lines = content.split("\n")
    # a trailing newline terminates the last line, it doesn't start a new one
    if lines and lines[-1] == "":
        lines.pop()
    return [line.strip() for line in lines]


def template_arguments(
    arguments: Iterable[str], line: str, placeholder: str = DEFAULTS["placeholder"]
) -> Tuple[str, ...]:
    """Substitute every placeholder occurrence in every argument. No escaping."""
    return tuple(arg.replace(placeholder, line) for arg in arguments)


def output_path(output_dir, command: str, line: str, prefix: Optional[str] = None) -> Path:
    """
    <dir>/[<prefix>#]<command>_<line>.stdout with spaces in line turned into underscores.

    Not injective: "a b" and "a_b" map to the same file. Clobber protection is
    what keeps colliding jobs from overwriting each other.
    """
    name = f"{os.path.basename(command)}_{line.replace(' ', '_')}.stdout"
    if prefix:
        name = f"{prefix}#{name}"
    return Path(output_dir) / name


def build_jobs(config: RunConfig, lines: Sequence[str]) -> List[Job]:
    jobs = []
    for idx, line in enumerate(lines):
        jobs.append(
            Job(
                command=config.executable,
                arguments=template_arguments(config.template, line, config.placeholder),
                stdout_file=output_path(config.output_dir, config.executable, line, config.prefix),
                clobber=config.clobber,
                record_output=config.record_output,
                index=idx,
                line=line,
            )
        )
    return jobs
