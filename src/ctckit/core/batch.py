"""Batch cost and gradients over independent samples.

Samples share nothing, so they are scored on a thread pool and the results
are combined by plain summation. Longer sequences are scheduled first so the
slowest sub-batches start early.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from ctckit.ctc import FrameGradients, forward, gradient
from ctckit.ctc.trellis import Frames

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH = 16


@dataclass(frozen=True)
class Sample:
    """A labeled emission sequence."""

    frames: Frames
    label: Sequence[int]


def total_cost(
    samples: Sequence[Sample],
    *,
    max_workers: int | None = None,
    max_batch: int = DEFAULT_MAX_BATCH,
) -> float:
    """Negated sum of log-likelihoods over all samples."""
    if max_batch < 1:
        raise ValueError(f"max_batch must be at least 1, got {max_batch}")
    if not samples:
        return 0.0

    ordered = sorted(samples, key=lambda sample: len(sample.frames), reverse=True)
    sub_batches = [ordered[i : i + max_batch] for i in range(0, len(ordered), max_batch)]
    workers = _resolve_workers(max_workers, len(sub_batches))
    logger.debug(
        "scoring %d samples in %d sub-batches on %d workers",
        len(samples),
        len(sub_batches),
        workers,
    )
    with ThreadPoolExecutor(max_workers=workers) as pool:
        costs = list(pool.map(_batch_cost, sub_batches))
    return sum(costs)


def cost_gradients(
    samples: Sequence[Sample],
    *,
    max_workers: int | None = None,
    tangents: Sequence[Frames] | None = None,
) -> list[FrameGradients]:
    """Per-sample gradients of ``-log p(label | frames)``, in input order.

    With ``tangents`` (one tangent sequence per sample) every result also
    carries the directional derivative of its gradient.
    """
    if tangents is not None and len(tangents) != len(samples):
        raise ValueError(f"expected {len(samples)} tangent sequences, got {len(tangents)}")
    if not samples:
        return []

    jobs = [
        (sample, tangents[index] if tangents is not None else None)
        for index, sample in enumerate(samples)
    ]
    order = sorted(range(len(jobs)), key=lambda index: len(samples[index].frames), reverse=True)
    workers = _resolve_workers(max_workers, len(jobs))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {index: pool.submit(_sample_gradient, *jobs[index]) for index in order}
        return [futures[index].result() for index in range(len(jobs))]


def _batch_cost(batch: list[Sample]) -> float:
    return -sum(forward(sample.frames, sample.label).log_prob for sample in batch)


def _sample_gradient(sample: Sample, sample_tangents: Frames | None) -> FrameGradients:
    table = forward(sample.frames, sample.label, tangents=sample_tangents)
    return gradient(sample.frames, sample.label, table, upstream=-1.0)


def _resolve_workers(max_workers: int | None, job_count: int) -> int:
    if max_workers is not None and max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got {max_workers}")
    limit = max_workers or os.cpu_count() or 1
    return max(1, min(limit, job_count))
