"""Greedy best-path decoding."""

from __future__ import annotations

from collections.abc import Sequence

from ctckit.ctc.trellis import Frames, validate_frames
from ctckit.decode.base import DecoderName


def best_path(frames: Frames) -> list[int]:
    """Collapse the per-frame argmax symbols into a label.

    Blanks are dropped and reset the repeat check, so ``a, blank, a`` decodes
    to two symbols while ``a, a`` decodes to one.
    """
    validate_frames(frames)
    last = -1
    output: list[int] = []
    for frame in frames:
        index = _argmax(frame)
        if index == len(frame) - 1:
            last = -1
        elif index != last:
            last = index
            output.append(index)
    return output


def _argmax(frame: Sequence[float]) -> int:
    # Ties go to the lowest index.
    best_index = 0
    best_value = 0.0
    for index, value in enumerate(frame):
        if index == 0 or value > best_value:
            best_index = index
            best_value = value
    return best_index


class BestPathDecoder:
    """Greedy decoder over per-frame maxima."""

    name: DecoderName = "best_path"

    def decode(self, frames: Frames) -> list[int]:
        return best_path(frames)
