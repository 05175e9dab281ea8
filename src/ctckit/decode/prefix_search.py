"""Exact CTC prefix search.

Frames whose blank log-probability exceeds a threshold are treated as
certain blanks: they split the sequence into runs that are searched
independently. Inside a run every prefix reachable with non-zero probability
is tracked, split by whether its most recent frame was a blank.
"""

from __future__ import annotations

from collections.abc import Sequence

from ctckit.ctc.logspace import NEG_INF, log_add
from ctckit.ctc.trellis import Frames, validate_frames
from ctckit.decode.base import DecoderName
from ctckit.errors import InvalidInputError

DEFAULT_BLANK_THRESHOLD = -1e-3

Prefix = tuple[int, ...]
StateKey = tuple[Prefix, bool]


def prefix_search(
    frames: Frames,
    blank_threshold: float = DEFAULT_BLANK_THRESHOLD,
    *,
    beam_width: int | None = None,
) -> list[int]:
    """Decode the most likely label by prefix enumeration.

    ``beam_width`` caps the number of distinct prefixes kept after each frame.
    ``None`` keeps all of them, which makes the search exact.
    """
    validate_frames(frames)
    if beam_width is not None and beam_width < 1:
        raise InvalidInputError(f"beam_width must be at least 1, got {beam_width}")

    output: list[int] = []
    for run in split_runs(frames, blank_threshold):
        output.extend(_search_run(run, beam_width))
    return output


def split_runs(frames: Frames, blank_threshold: float) -> list[list[Sequence[float]]]:
    """Split at frames whose blank log-probability is above ``blank_threshold``.

    Separator frames are dropped; empty runs are not returned.
    """
    runs: list[list[Sequence[float]]] = []
    current: list[Sequence[float]] = []
    for frame in frames:
        if frame[-1] > blank_threshold:
            if current:
                runs.append(current)
                current = []
        else:
            current.append(frame)
    if current:
        runs.append(current)
    return runs


def state_order(key: StateKey) -> tuple[bool, int, Prefix]:
    """Total order over states: blank flag, then length, then symbols."""
    prefix, ends_with_blank = key
    return ends_with_blank, len(prefix), prefix


def _search_run(run: list[Sequence[float]], beam_width: int | None) -> list[int]:
    states: dict[StateKey, float] = {((), True): 0.0}
    for frame in run:
        states = _extend_states(states, frame)
        if beam_width is not None:
            states = _prune(states, beam_width)

    totals = _merge_blank_variants(states)
    best_prefix: Prefix = ()
    best_prob = NEG_INF
    for prefix in sorted(totals, key=lambda item: (len(item), item)):
        if totals[prefix] > best_prob:
            best_prefix = prefix
            best_prob = totals[prefix]
    return list(best_prefix)


def _extend_states(states: dict[StateKey, float], frame: Sequence[float]) -> dict[StateKey, float]:
    blank = len(frame) - 1
    next_states: dict[StateKey, float] = {}

    def add(key: StateKey, log_prob: float) -> None:
        if log_prob == NEG_INF:
            return
        next_states[key] = log_add(next_states.get(key, NEG_INF), log_prob)

    for key in sorted(states, key=state_order):
        prefix, ends_with_blank = key
        log_prob = states[key]
        add((prefix, True), log_prob + frame[blank])
        if not ends_with_blank:
            add((prefix, False), log_prob + frame[prefix[-1]])

        for symbol in range(blank):
            # Holding the last symbol is the repeat handled above, not a new emission.
            if not ends_with_blank and prefix[-1] == symbol:
                continue
            add((prefix + (symbol,), False), log_prob + frame[symbol])
    return next_states


def _merge_blank_variants(states: dict[StateKey, float]) -> dict[Prefix, float]:
    totals: dict[Prefix, float] = {}
    for (prefix, _), log_prob in states.items():
        totals[prefix] = log_add(totals.get(prefix, NEG_INF), log_prob)
    return totals


def _prune(states: dict[StateKey, float], beam_width: int) -> dict[StateKey, float]:
    totals = _merge_blank_variants(states)
    if len(totals) <= beam_width:
        return states
    ranked = sorted(totals, key=lambda prefix: (-totals[prefix], len(prefix), prefix))
    kept = set(ranked[:beam_width])
    return {key: value for key, value in states.items() if key[0] in kept}


class PrefixSearchDecoder:
    """Prefix search decoder with blank-run segmentation."""

    name: DecoderName = "prefix_search"

    def __init__(
        self,
        blank_threshold: float = DEFAULT_BLANK_THRESHOLD,
        beam_width: int | None = None,
    ) -> None:
        self.blank_threshold = blank_threshold
        self.beam_width = beam_width

    def decode(self, frames: Frames) -> list[int]:
        return prefix_search(frames, self.blank_threshold, beam_width=self.beam_width)
