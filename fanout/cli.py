import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import RunConfig
from .errors import InputReadError
from .jobs import build_jobs, load_lines
from .models import DEFAULTS, JobResult
from .worker import start_workers

log = logging.getLogger(__name__)

app = typer.Typer(
    help="fanout - run a command once per input line across a pool of worker threads.",
    add_completion=False,
)


def _console() -> Console:
    # stdout carries the mirrored command output, so everything we say goes to stderr
    return Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=_console(), show_path=False, show_time=verbose)],
        force=True,
    )


def _print_summary(results: List[JobResult]) -> None:
    console = _console()
    failed = [r for r in results if not r.ok]
    console.print(
        f"Ran {len(results)} job(s): [green]{len(results) - len(failed)} ok[/green], "
        f"[red]{len(failed)} failed[/red]"
    )
    if not failed:
        return
    t = Table(title="Failed jobs")
    for c in ["#", "input", "state", "exit", "error"]:
        t.add_column(c)
    for r in failed:
        t.add_row(
            str(r.job.index),
            escape(r.job.line),
            r.state,
            "" if r.returncode is None else str(r.returncode),
            escape(f"{r.error_kind}: {r.error}"[:120] if r.error else ""),
        )
    console.print(t)


@app.command(context_settings={"allow_interspersed_args": False, "ignore_unknown_options": True})
def run(
    command: List[str] = typer.Argument(
        ...,
        metavar="COMMAND [ARGS]...",
        help="Command and arguments, with %INPUT% where each input line goes.",
    ),
    input_file: Path = typer.Option(..., "--input-file", "-i", help="File with one value per line"),
    output: Path = typer.Option(
        Path(DEFAULTS["output_dir"]), "--output", "-o", help="Directory for .stdout files"
    ),
    no_record: bool = typer.Option(False, "--no-record", "-n", help="Only echo output, don't write files"),
    threads: Optional[int] = typer.Option(
        None, "--threads", "-t", min=1, help="Worker threads (default: FANOUT_THREADS or CPU count)"
    ),
    clobber: bool = typer.Option(False, "--clobber", help="Overwrite existing output files"),
    prefix: Optional[str] = typer.Option(None, "--prefix", "-p", help="Prefix for output file names"),
    placeholder: str = typer.Option(DEFAULTS["placeholder"], "--placeholder", help="Token replaced by each line"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Run COMMAND once per line of --input-file."""
    _configure_logging(verbose)
    console = _console()

    overrides = {} if threads is None else {"threads": threads}
    try:
        config = RunConfig(
            input_file=input_file,
            command=tuple(command),
            output_dir=output,
            record_output=not no_record,
            clobber=clobber,
            prefix=prefix,
            placeholder=placeholder,
            **overrides,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))

    try:
        lines = load_lines(config.input_file)
    except InputReadError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if config.record_output:
        try:
            config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            console.print(f"[red]Error:[/red] cannot create output directory: {escape(str(e))}")
            raise typer.Exit(1)

    jobs = build_jobs(config, lines)
    log.debug("%d job(s), %d worker(s)", len(jobs), config.threads)

    try:
        results = start_workers(jobs, config.threads)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted.[/yellow]")
        raise typer.Exit(130)

    _print_summary(results)
    if any(not r.ok for r in results):
        raise typer.Exit(1)
