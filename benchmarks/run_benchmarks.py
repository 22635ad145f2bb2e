
from __future__ import annotations

import argparse
import dataclasses
import os
import pathlib
import subprocess
import sys

from loopbench import HarnessConfig, LoopBenchError, load_config, load_suite, default_suite, build_harness
from loopbench.config import ENV_RUNS
from loopbench.export import collect_environment_meta, export_csv, export_json

"""Batch benchmark driver.

Times every registered workload (or the entries of a suite file) and writes
`results/bench_summary.json` plus a CSV of the report rows.
"""

HERE = pathlib.Path(__file__).parent
GRAPH_SCRIPT = HERE / "render_graphs.py"
RESULTS = HERE.parent / "results"
DEFAULT_RUNS = 5


def parse_args(argv: list[str] | None = None, config: HarnessConfig | None = None) -> argparse.Namespace:
    config = config or HarnessConfig(repetitions=DEFAULT_RUNS)
    parser = argparse.ArgumentParser(description="Run the loop micro-benchmark suite.")
    parser.add_argument(
        "--runs",
        type=int,
        default=config.repetitions,
        help="Number of timed repetitions per workload (default: LOOPBENCH_RUNS or 5).",
    )
    parser.add_argument(
        "--warmup",
        type=int,
        default=config.warmup,
        help="Untimed calls per workload before sampling (default: LOOPBENCH_WARMUP or 0).",
    )
    parser.add_argument(
        "--suite",
        type=pathlib.Path,
        default=None,
        help="JSON suite file; defaults to every registered workload.",
    )
    parser.add_argument(
        "--out-dir",
        type=pathlib.Path,
        default=RESULTS,
        help="Directory receiving bench_summary.json/.csv.",
    )
    parser.add_argument(
        "--render-graphs",
        action="store_true",
        help="Invoke the graph renderer after benchmarks finish.",
    )
    parser.add_argument(
        "--graph-script",
        type=pathlib.Path,
        default=GRAPH_SCRIPT,
        help="Override the graph renderer script location.",
    )
    parser.add_argument(
        "--graph-args",
        nargs=argparse.REMAINDER,
        default=None,
        help="Additional arguments forwarded to the graph renderer (must follow '--').",
    )
    return parser.parse_args(argv)


def _run_graph_renderer(script_path: pathlib.Path, summary: pathlib.Path, extra_args: list[str] | None) -> None:
    if not script_path.exists():
        print(f"Graph renderer not found at {script_path}. Skipping graph generation.")
        return

    cmd = [sys.executable, str(script_path), "--input", str(summary)]
    if extra_args:
        cmd.extend(extra_args)

    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as exc:
        print(f"Graph renderer exited with status {exc.returncode}. Command: {' '.join(cmd)}")


def _load_script_config() -> HarnessConfig:
    config = load_config()
    if not os.environ.get(ENV_RUNS):
        config = dataclasses.replace(config, repetitions=DEFAULT_RUNS)
    return config


def main(argv: list[str] | None = None) -> int:
    try:
        config = _load_script_config()
        args = parse_args(argv, config)
        entries = load_suite(args.suite) if args.suite else default_suite()
        harness = build_harness(entries, HarnessConfig(
            repetitions=args.runs,
            warmup=args.warmup,
            capture_results=config.capture_results,
            results_dir=str(args.out_dir),
        ))

        def _progress(label: str, i: int, total: int) -> None:
            if i == total:
                print(f"{label}: {total} runs")

        report = harness.run(args.runs, progress=_progress)
    except LoopBenchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    meta = {
        "repetitions": args.runs,
        "warmup": args.warmup,
        "environment": collect_environment_meta(),
    }
    out = export_json(report, args.out_dir / "bench_summary.json", samples=harness.samples, meta=meta)
    export_csv(report, args.out_dir / "bench_summary.csv")
    print(f"Wrote {out}")
    for row in report.failed:
        print(f"FAILED {row.label}: {row.error}")

    if args.render_graphs:
        extra = args.graph_args or []
        # argparse.REMAINDER keeps the leading '--' when provided; drop it for readability.
        if extra[:1] == ["--"]:
            extra = extra[1:]
        _run_graph_renderer(args.graph_script, out, extra)
    return 1 if report.failed else 0

if __name__ == "__main__":
    sys.exit(main())
