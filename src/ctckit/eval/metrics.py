"""Decoding quality and runtime metrics."""

from __future__ import annotations

from collections.abc import Sequence
from statistics import mean


def edit_distance(reference: Sequence[int], hypothesis: Sequence[int]) -> int:
    """Levenshtein distance between two label sequences."""
    previous = list(range(len(hypothesis) + 1))
    for i, ref_symbol in enumerate(reference, start=1):
        current = [i] + [0] * len(hypothesis)
        for j, hyp_symbol in enumerate(hypothesis, start=1):
            cost = 0 if ref_symbol == hyp_symbol else 1
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            )
        previous = current
    return previous[len(hypothesis)]


def label_error_rate(
    references: Sequence[Sequence[int]],
    hypotheses: Sequence[Sequence[int]],
) -> float:
    """Total edit distance divided by total reference length."""
    if len(references) != len(hypotheses):
        raise ValueError(
            f"got {len(references)} references but {len(hypotheses)} hypotheses"
        )
    errors = sum(edit_distance(ref, hyp) for ref, hyp in zip(references, hypotheses, strict=True))
    total = sum(len(ref) for ref in references)
    if total == 0:
        return 0.0 if errors == 0 else 1.0
    return errors / total


def summarize_decoding(
    references: Sequence[Sequence[int]],
    hypotheses: Sequence[Sequence[int]],
    *,
    total_runtime_sec: float,
    total_frames: int,
) -> dict[str, float]:
    """Summarize decoder accuracy and speed for benchmark reporting."""
    exact = [list(ref) == list(hyp) for ref, hyp in zip(references, hypotheses, strict=True)]
    per_case = [
        edit_distance(ref, hyp) / max(1, len(ref))
        for ref, hyp in zip(references, hypotheses, strict=True)
    ]
    frames_per_sec = total_frames / total_runtime_sec if total_runtime_sec > 0 else 0.0
    return {
        "label_error_rate": round(label_error_rate(references, hypotheses), 4),
        "mean_case_error_rate": round(mean(per_case), 4) if per_case else 0.0,
        "sequence_accuracy": round(sum(exact) / len(exact), 4) if exact else 0.0,
        "case_count": float(len(exact)),
        "total_frames": float(total_frames),
        "frames_per_sec": round(frames_per_sec, 2),
        "total_runtime_sec": round(total_runtime_sec, 4),
    }
