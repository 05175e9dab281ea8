"""Emission file loading.

An emission file is JSON: either a bare list of frames, or an object with a
``frames`` list and an optional ``label`` list. Frames are natural-log
probabilities with the blank last, unless loaded with ``probabilities=True``.
"""

from __future__ import annotations

import json
import math
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ctckit.errors import InvalidInputError


@dataclass(frozen=True)
class EmissionFile:
    """Frames and optional reference label read from disk."""

    frames: list[list[float]]
    label: list[int] | None


def load_emissions(path: str | Path, *, probabilities: bool = False) -> EmissionFile:
    """Read an emission file, converting probabilities to logs if requested."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(payload, list):
        raw_frames, raw_label = payload, None
    elif isinstance(payload, dict) and "frames" in payload:
        raw_frames, raw_label = payload["frames"], payload.get("label")
    else:
        raise InvalidInputError(f"{path}: expected a list of frames or an object with 'frames'")

    frames = [[float(value) for value in frame] for frame in raw_frames]
    if probabilities:
        frames = to_log_probs(frames)
    label = None if raw_label is None else [int(symbol) for symbol in raw_label]
    return EmissionFile(frames=frames, label=label)


def to_log_probs(frames: Sequence[Sequence[float]]) -> list[list[float]]:
    """Take the natural log of every probability; zero maps to ``-inf``."""
    output: list[list[float]] = []
    for index, frame in enumerate(frames):
        row: list[float] = []
        for value in frame:
            if value < 0:
                raise InvalidInputError(f"frames[{index}] has negative probability {value!r}")
            row.append(math.log(value) if value > 0 else float("-inf"))
        output.append(row)
    return output
