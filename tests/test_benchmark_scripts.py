from __future__ import annotations

import json
from pathlib import Path

import pytest

from benchmarks import render_graphs, run_benchmarks
from loopbench import BenchmarkHarness, fibonacci
from loopbench.export import export_json


def _suite(tmp_path: Path) -> Path:
    path = tmp_path / "suite.json"
    path.write_text(
        json.dumps({"fib": {"task": "fibonacci", "n": 15}, "pi": {"task": "pi", "n": 200}}),
        encoding="utf-8",
    )
    return path


def test_run_benchmarks_writes_summary(tmp_path: Path, env_clean) -> None:
    out_dir = tmp_path / "results"
    code = run_benchmarks.main(["--runs", "2", "--suite", str(_suite(tmp_path)), "--out-dir", str(out_dir)])
    assert code == 0
    payload = json.loads((out_dir / "bench_summary.json").read_text(encoding="utf-8"))
    assert {r["label"] for r in payload["report"]} == {"fib", "pi"}
    assert payload["meta"]["repetitions"] == 2
    assert (out_dir / "bench_summary.csv").exists()


def test_run_benchmarks_invokes_renderer(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, env_clean) -> None:
    calls = []
    monkeypatch.setattr(run_benchmarks.subprocess, "run", lambda cmd, check: calls.append(cmd))
    out_dir = tmp_path / "results"
    run_benchmarks.main(
        [
            "--runs", "1",
            "--suite", str(_suite(tmp_path)),
            "--out-dir", str(out_dir),
            "--render-graphs",
            "--graph-args", "--log-scale",
        ]
    )
    assert len(calls) == 1
    cmd = calls[0]
    assert cmd[1] == str(run_benchmarks.GRAPH_SCRIPT)
    assert cmd[2:4] == ["--input", str(out_dir / "bench_summary.json")]
    assert cmd[-1] == "--log-scale"


@pytest.mark.parametrize("runs", ["0", "-2"])
def test_run_benchmarks_rejects_bad_runs(tmp_path: Path, env_clean, capsys, runs: str) -> None:
    out_dir = tmp_path / "results"
    code = run_benchmarks.main(["--runs", runs, "--suite", str(_suite(tmp_path)), "--out-dir", str(out_dir)])
    assert code == 2
    assert "repetitions must be a positive integer" in capsys.readouterr().err
    assert not (out_dir / "bench_summary.json").exists()


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"fib": {"task": "nope", "n": 3}}),
        json.dumps({"fib": {"task": "fibonacci", "n": -1}}),
    ],
)
def test_run_benchmarks_bad_suite_exits_2(tmp_path: Path, env_clean, capsys, content: str) -> None:
    suite = tmp_path / "bad.json"
    suite.write_text(content, encoding="utf-8")
    code = run_benchmarks.main(["--suite", str(suite), "--out-dir", str(tmp_path / "results")])
    assert code == 2
    assert capsys.readouterr().err.startswith("Error: ")


def test_run_benchmarks_missing_suite_exits_2(tmp_path: Path, env_clean) -> None:
    assert run_benchmarks.main(["--suite", str(tmp_path / "absent.json")]) == 2


def test_run_benchmarks_runs_default_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, env_clean) -> None:
    monkeypatch.setenv("LOOPBENCH_RUNS", "3")
    out_dir = tmp_path / "results"
    assert run_benchmarks.main(["--suite", str(_suite(tmp_path)), "--out-dir", str(out_dir)]) == 0
    payload = json.loads((out_dir / "bench_summary.json").read_text(encoding="utf-8"))
    assert payload["meta"]["repetitions"] == 3
    assert {r["n_samples"] for r in payload["report"]} == {3}


def test_run_benchmarks_runs_default_without_env(env_clean) -> None:
    config = run_benchmarks._load_script_config()
    assert config.repetitions == run_benchmarks.DEFAULT_RUNS
    assert run_benchmarks.parse_args([], config).runs == run_benchmarks.DEFAULT_RUNS


def test_run_benchmarks_bad_env_exits_2(monkeypatch: pytest.MonkeyPatch, env_clean, capsys) -> None:
    monkeypatch.setenv("LOOPBENCH_RUNS", "lots")
    assert run_benchmarks.main([]) == 2
    assert "LOOPBENCH_RUNS" in capsys.readouterr().err


def test_render_graphs_from_export(tmp_path: Path) -> None:
    harness = BenchmarkHarness()
    harness.register("fib-10", fibonacci, 10)
    harness.register("fib-30", fibonacci, 30)
    harness.register("broken", lambda: 1 // 0)
    report = harness.run(3)
    summary = export_json(report, tmp_path / "bench_summary.json", samples=harness.samples)

    outdir = tmp_path / "graphs"
    written = render_graphs.render(summary, outdir, log_scale=True)
    assert {p.name for p in written} == {"median_latency.png", "run_series.png"}
    for path in written:
        assert path.stat().st_size > 0
    captions = (outdir / "captions.md").read_text(encoding="utf-8")
    assert "Failed: broken" in captions


def test_render_graphs_skips_series_without_samples(tmp_path: Path) -> None:
    harness = BenchmarkHarness()
    harness.register("fib", fibonacci, 10)
    summary = export_json(harness.run(2), tmp_path / "summary.json")
    written = render_graphs.render(summary, tmp_path / "graphs")
    assert [p.name for p in written] == ["median_latency.png"]


def test_render_graphs_rows_in_ms() -> None:
    payload = {
        "report": [
            {"label": "a", "n": 1, "n_samples": 2, "min": 1_000_000, "median": 2_000_000, "max": 3_000_000},
            {"label": "b", "n": 1, "n_samples": 0, "failed": True},
        ],
        "samples": [
            {"label": "a", "duration_ns": 1_000_000},
            {"label": "a", "duration_ns": 3_000_000},
            {"label": "b", "duration_ns": 5, "error": "b: boom"},
        ],
    }
    rows = render_graphs.load_rows(payload)
    assert rows[0].median_ms == 2.0
    assert rows[1].failed and rows[1].median_ms is None
    assert render_graphs.load_series(payload) == {"a": [1.0, 3.0]}


def test_render_graphs_main_missing_input(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        render_graphs.main(["--input", str(tmp_path / "absent.json")])
