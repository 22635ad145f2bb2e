from __future__ import annotations
from dataclasses import replace
from pathlib import Path
import json
import logging
import subprocess
import sys
from typing import List, Optional

import typer

from loopbench import LoopBenchError, load_config, registry
from loopbench.export import build_export_payload
from .runners.common import export_summary, format_table, resolve_entries, run_suite

app = typer.Typer(add_completion=False, help="Loop micro-benchmark CLI")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("list-tasks")
def list_tasks():
    """List registered workloads and their default input."""
    for name, task in registry.list().items():
        typer.echo(f"- {name} (n={task.default_n}): {task.description}")


@app.command()
def compute(name: str, n: Optional[int] = typer.Argument(None, help="Input size; defaults to the workload's own.")):
    """Run one workload once and print its result."""
    try:
        task = registry.get(name)
        value = task(task.default_n if n is None else n)
    except LoopBenchError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)
    if task.kind == "sequence":
        typer.echo(" ".join(str(v) for v in value))
    else:
        typer.echo(repr(value))


@app.command()
def run(
    task: Optional[List[str]] = typer.Option(
        None,
        "--task",
        "-t",
        help="Workload to time: NAME, NAME:N or LABEL=NAME:N. Repeatable. Defaults to every workload.",
    ),
    suite: Optional[Path] = typer.Option(None, "--suite", help="JSON suite file of {label: {task, n}}."),
    runs: Optional[int] = typer.Option(None, "--runs", help="Timed repetitions per task [env LOOPBENCH_RUNS]."),
    warmup: Optional[int] = typer.Option(None, "--warmup", help="Untimed calls before sampling [env LOOPBENCH_WARMUP]."),
    export: Optional[str] = typer.Option(None, "--export", help="Write the report and raw samples as JSON."),
    csv_path: Optional[str] = typer.Option(None, "--csv", help="Write the report rows as CSV."),
    print_json: bool = typer.Option(False, "--print-json/--no-print-json", help="Echo the JSON payload."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Time the selected workloads and print the report, fastest first."""
    _setup_logging(verbose)
    try:
        config = load_config()
        overrides = {}
        if runs is not None:
            overrides["repetitions"] = runs
        if warmup is not None:
            overrides["warmup"] = warmup
        if overrides:
            config = replace(config, **overrides)
        entries = resolve_entries(task, str(suite) if suite else None)

        def _progress(label: str, i: int, total: int) -> None:
            if verbose:
                typer.echo(f"[{label}] {i}/{total}", err=True)

        summary = run_suite(entries, config, progress=_progress)
        export_summary(summary, export, csv_path)
    except LoopBenchError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)

    typer.echo(format_table(summary.report))
    if print_json:
        typer.echo(json.dumps(build_export_payload(summary.report, meta=summary.meta), indent=2))
    if summary.failed:
        raise typer.Exit(code=1)


@app.command("run-tests")
def run_tests(
    pytest_args: Optional[List[str]] = typer.Argument(
        None,
        metavar="PYTEST_ARGS...",
        help="Extra arguments forwarded to pytest (after default targets).",
    ),
) -> None:
    """Execute the repository test suite via pytest."""
    repo_root = Path.cwd()
    command = [sys.executable, "-m", "pytest"]
    root_tests = repo_root / "tests"
    if root_tests.exists():
        command.append(str(root_tests))
    else:
        typer.echo("Warning: `tests/` directory not found relative to current working directory.", err=True)
    if pytest_args:
        command.extend(pytest_args)

    typer.echo(f"Running pytest via: {' '.join(command)}")
    outcome = subprocess.run(command, cwd=repo_root)
    raise typer.Exit(outcome.returncode)


def app_main():
    app()

if __name__ == "__main__":
    app_main()
