#!/usr/bin/env python3
"""Run a decoding benchmark and write artifacts.

Manifest format (JSONL):
{
  "id": "utt-001",
  "emissions_path": "path/to/emissions.json",
  "reference_label": [3, 1, 4],
  "probabilities": false
}
"""

from __future__ import annotations

import argparse
import csv
import json
import subprocess
import sys
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ctckit.config import load_config
from ctckit.core import run_decoding
from ctckit.decode import DECODER_NAMES
from ctckit.eval import edit_distance, summarize_decoding
from ctckit.io import load_emissions
from ctckit.models import DecodeRequest


@dataclass(frozen=True)
class BenchmarkCase:
    case_id: str
    emissions_path: str
    reference_label: list[int]
    probabilities: bool


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run ctckit decoding benchmark and save artifacts.")
    parser.add_argument("--manifest", required=True, help="Path to benchmark JSONL manifest")
    parser.add_argument("--output-root", default="eval/runs", help="Artifact root directory")
    parser.add_argument(
        "--decoder",
        default="prefix_search",
        choices=list(DECODER_NAMES),
        help="Decoding algorithm",
    )
    parser.add_argument("--blank-threshold", type=float, default=None, help="Prefix search threshold")
    parser.add_argument("--beam-width", type=int, default=None, help="Prefix search beam width")
    return parser.parse_args()


def load_manifest(path: Path) -> list[BenchmarkCase]:
    cases: list[BenchmarkCase] = []
    for line_num, raw_line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        payload = json.loads(line)
        emissions_path = Path(payload["emissions_path"])
        if not emissions_path.is_absolute():
            emissions_path = path.parent / emissions_path
        cases.append(
            BenchmarkCase(
                case_id=str(payload.get("id") or f"line-{line_num}"),
                emissions_path=str(emissions_path),
                reference_label=[int(symbol) for symbol in payload["reference_label"]],
                probabilities=bool(payload.get("probabilities", False)),
            )
        )
    return cases


def run_benchmark(
    cases: list[BenchmarkCase],
    *,
    decoder: str,
    blank_threshold: float | None,
    beam_width: int | None,
) -> dict[str, Any]:
    config = load_config()
    references: list[list[int]] = []
    hypotheses: list[list[int]] = []
    rows: list[dict[str, Any]] = []
    total_runtime_sec = 0.0
    total_frames = 0

    for case in cases:
        emissions = load_emissions(case.emissions_path, probabilities=case.probabilities)
        started = time.perf_counter()
        response = run_decoding(
            DecodeRequest(
                frames=emissions.frames,
                decoder=decoder,
                blank_threshold=blank_threshold,
                beam_width=beam_width,
            ),
            config,
        )
        elapsed = time.perf_counter() - started

        references.append(case.reference_label)
        hypotheses.append(response.label)
        total_runtime_sec += elapsed
        total_frames += response.frame_count
        rows.append(
            {
                "case_id": case.case_id,
                "decoder": decoder,
                "runtime_sec": round(elapsed, 6),
                "frames": response.frame_count,
                "reference_length": len(case.reference_label),
                "hypothesis_length": len(response.label),
                "edit_distance": edit_distance(case.reference_label, response.label),
                "hypothesis": " ".join(str(symbol) for symbol in response.label),
            }
        )

    summary = summarize_decoding(
        references,
        hypotheses,
        total_runtime_sec=total_runtime_sec,
        total_frames=total_frames,
    )
    return {"summary": summary, "rows": rows}


def write_artifacts(
    output_root: Path,
    *,
    decoder: str,
    manifest: Path,
    result: dict[str, Any],
) -> Path:
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    git_sha = _git_sha()
    out_dir = output_root / f"{timestamp}_{git_sha[:8]}"
    out_dir.mkdir(parents=True, exist_ok=True)

    metrics_payload = {
        "generated_at": datetime.now(UTC).isoformat(),
        "git_sha": git_sha,
        "decoder": decoder,
        "manifest_path": str(manifest),
        "summary": result["summary"],
    }
    (out_dir / "metrics.json").write_text(
        json.dumps(metrics_payload, indent=2) + "\n",
        encoding="utf-8",
    )

    with (out_dir / "per_case.csv").open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(result["rows"][0].keys()) if result["rows"] else [])
        if result["rows"]:
            writer.writeheader()
            writer.writerows(result["rows"])

    (out_dir / "run.json").write_text(
        json.dumps({"command": " ".join([sys.executable, *sys.argv])}, indent=2) + "\n",
        encoding="utf-8",
    )
    return out_dir


def _git_sha() -> str:
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            check=True,
            text=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return proc.stdout.strip()


def main() -> int:
    args = parse_args()
    manifest = Path(args.manifest)
    cases = load_manifest(manifest)
    result = run_benchmark(
        cases,
        decoder=args.decoder,
        blank_threshold=args.blank_threshold,
        beam_width=args.beam_width,
    )
    out_dir = write_artifacts(
        Path(args.output_root),
        decoder=args.decoder,
        manifest=manifest,
        result=result,
    )
    print(json.dumps(result["summary"], indent=2))
    print(f"Artifacts written to: {out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
