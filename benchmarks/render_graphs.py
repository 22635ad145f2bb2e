from __future__ import annotations

import argparse
import pathlib
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

try:
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
except ImportError as exc:  # pragma: no cover - import guard
    raise SystemExit(
        "matplotlib is required for graph rendering. Install it via 'pip install matplotlib'."
    ) from exc

from loopbench.export import load_report_json

HERE = pathlib.Path(__file__).resolve().parent
RESULTS_DIR = HERE.parent / "results"
DEFAULT_INPUT = RESULTS_DIR / "bench_summary.json"
DEFAULT_OUTPUT_DIR = RESULTS_DIR / "graphs"

_NS_PER_MS = 1_000_000.0


@dataclass
class Row:
    label: str
    n: Optional[int]
    n_samples: int
    min_ms: Optional[float]
    median_ms: Optional[float]
    max_ms: Optional[float]
    failed: bool


@dataclass
class CaptionLog:
    entries: List[Tuple[pathlib.Path, str]] = field(default_factory=list)

    def add(self, path: pathlib.Path, text: str) -> None:
        self.entries.append((path, text))

    def write(self, root: pathlib.Path) -> None:
        if not self.entries:
            return
        root.mkdir(parents=True, exist_ok=True)
        entries = sorted(
            ((p.relative_to(root), h) for p, h in self.entries),
            key=lambda item: str(item[0]),
        )
        lines = ["# Graph Captions\n"]
        for rel_path, heading in entries:
            lines.append(f"![{rel_path}]({rel_path})\n")
            lines.append(f"{heading}\n")
        (root / "captions.md").write_text("\n".join(lines), encoding="utf-8")


def _ms(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value) / _NS_PER_MS
    except (TypeError, ValueError):
        return None


def load_rows(payload: Dict[str, Any]) -> List[Row]:
    rows: List[Row] = []
    for rec in payload.get("report", []):
        rows.append(
            Row(
                label=str(rec.get("label", "")),
                n=rec.get("n"),
                n_samples=int(rec.get("n_samples") or 0),
                min_ms=_ms(rec.get("min")),
                median_ms=_ms(rec.get("median")),
                max_ms=_ms(rec.get("max")),
                failed=bool(rec.get("failed")),
            )
        )
    return rows


def load_series(payload: Dict[str, Any]) -> Dict[str, List[float]]:
    series: Dict[str, List[float]] = defaultdict(list)
    for sample in payload.get("samples", []) or []:
        if sample.get("error"):
            continue
        value = _ms(sample.get("duration_ns"))
        if value is not None:
            series[str(sample.get("label", ""))].append(value)
    return dict(series)


def _save_with_caption(
    fig: plt.Figure,
    outfile: pathlib.Path,
    caption: str,
    captions: CaptionLog,
    rect: Tuple[float, float, float, float] = (0, 0.08, 1, 1),
) -> None:
    fig.tight_layout(rect=rect)
    fig.text(0.5, 0.02, caption, ha="center", va="center")
    fig.savefig(outfile, dpi=150)
    captions.add(outfile, caption)
    plt.close(fig)


def plot_medians(rows: Sequence[Row], outdir: pathlib.Path, captions: CaptionLog, *, log_scale: bool = False) -> pathlib.Path | None:
    ok = [r for r in rows if not r.failed and r.median_ms is not None]
    if not ok:
        return None
    labels = [r.label for r in ok]
    medians = [r.median_ms for r in ok]
    lower = [r.median_ms - (r.min_ms if r.min_ms is not None else r.median_ms) for r in ok]
    upper = [(r.max_ms if r.max_ms is not None else r.median_ms) - r.median_ms for r in ok]

    fig, ax = plt.subplots(figsize=(max(4.0, 1.4 * len(ok)), 4.0))
    ax.bar(labels, medians, yerr=[lower, upper], capsize=4, color="#4c72b0")
    ax.set_ylabel("median latency (ms)")
    ax.set_title("Median call latency, fastest first")
    if log_scale:
        ax.set_yscale("log")
    for tick in ax.get_xticklabels():
        tick.set_rotation(20)
        tick.set_horizontalalignment("right")
    outfile = outdir / "median_latency.png"
    failed = [r.label for r in rows if r.failed]
    caption = "Whiskers span min to max."
    if failed:
        caption += f" Failed: {', '.join(failed)}."
    _save_with_caption(fig, outfile, caption, captions)
    return outfile


def plot_series(series: Dict[str, List[float]], outdir: pathlib.Path, captions: CaptionLog) -> pathlib.Path | None:
    if not series:
        return None
    fig, ax = plt.subplots(figsize=(6.0, 4.0))
    for label, values in series.items():
        ax.plot(range(1, len(values) + 1), values, marker="o", label=label)
    ax.set_xlabel("run")
    ax.set_ylabel("latency (ms)")
    ax.set_title("Per-run latency")
    ax.legend()
    outfile = outdir / "run_series.png"
    _save_with_caption(fig, outfile, "Samples in execution order.", captions)
    return outfile


def render(input_path: pathlib.Path, output_dir: pathlib.Path, *, log_scale: bool = False) -> List[pathlib.Path]:
    payload = load_report_json(input_path)
    output_dir.mkdir(parents=True, exist_ok=True)
    captions = CaptionLog()
    written = [
        plot_medians(load_rows(payload), output_dir, captions, log_scale=log_scale),
        plot_series(load_series(payload), output_dir, captions),
    ]
    captions.write(output_dir)
    return [p for p in written if p is not None]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render graphs from an exported benchmark report.")
    parser.add_argument("--input", type=pathlib.Path, default=DEFAULT_INPUT, help="bench_summary.json to read.")
    parser.add_argument("--output-dir", type=pathlib.Path, default=DEFAULT_OUTPUT_DIR, help="Directory for PNGs.")
    parser.add_argument("--log-scale", action="store_true", help="Use a logarithmic latency axis.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    if not args.input.exists():
        raise SystemExit(f"Report not found: {args.input}")
    for path in render(args.input, args.output_dir, log_scale=args.log_scale):
        print(f"Wrote {path}")


if __name__ == "__main__":
    main()
