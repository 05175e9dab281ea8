"""CTC trellis: the forward recursion over the blank-augmented label.

``frames[t][k]`` are natural-log probabilities for frame ``t`` and symbol ``k``;
the blank symbol is always the last entry of a frame.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from ctckit.ctc.logspace import NEG_INF, log_add_tangent
from ctckit.errors import InvalidInputError

Frames = Sequence[Sequence[float]]


def build_state_symbols(label: Sequence[int], blank_id: int) -> list[int]:
    """Build expanded CTC state sequence symbols.

    States alternate between blank and explicit label symbols:
    [blank, label_0, blank, label_1, ..., label_n, blank]
    """
    states: list[int] = [blank_id]
    for symbol in label:
        states.append(symbol)
        states.append(blank_id)
    return states


def can_skip_blank(label: Sequence[int], label_index: int) -> bool:
    """Whether the state for ``label[label_index]`` may be entered from two states back.

    Hopping over the separating blank is only allowed between distinct symbols;
    otherwise ``[a, a]`` would be indistinguishable from a single held ``a``.
    """
    return label_index > 0 and label[label_index - 1] != label[label_index]


def validate_frames(frames: Frames, *, name: str = "frames") -> int:
    """Check that every frame has the same width and return that width.

    Returns 0 for an empty sequence.
    """
    width = 0
    for index, frame in enumerate(frames):
        if index == 0:
            width = len(frame)
            if width == 0:
                raise InvalidInputError(f"{name}[0] must contain at least the blank entry")
        elif len(frame) != width:
            raise InvalidInputError(
                f"{name}[{index}] has {len(frame)} entries, expected {width}"
            )
        for value in frame:
            if math.isnan(value) or value == math.inf:
                raise InvalidInputError(f"{name}[{index}] contains {value!r}")
    return width


def validate_label(label: Sequence[int], symbol_count: int | None) -> None:
    """Check label indices; ``symbol_count`` excludes the blank.

    ``None`` skips the upper bound, which is unknown for an empty sequence.
    """
    for index, symbol in enumerate(label):
        if isinstance(symbol, bool) or not isinstance(symbol, int):
            raise InvalidInputError(f"label[{index}] must be an integer, got {symbol!r}")
        if symbol < 0 or (symbol_count is not None and symbol >= symbol_count):
            raise InvalidInputError(
                f"label[{index}]={symbol} is outside the alphabet of {symbol_count} symbols"
            )


@dataclass(frozen=True)
class ForwardTable:
    """Forward variables of one likelihood computation.

    ``rows[t][s]`` is the log-probability of every alignment of the first
    ``t + 1`` frames that ends on extended-label state ``s``. ``tangents`` is
    only present when the table was built with input tangents.
    """

    label: tuple[int, ...]
    width: int
    rows: list[list[float]]
    tangents: list[list[float]] | None
    log_prob: float
    log_prob_tangent: float

    @property
    def state_count(self) -> int:
        return 2 * len(self.label) + 1

    def previous_row(self, frame: int) -> list[float]:
        """Row the recursion read when it consumed ``frame``."""
        if frame == 0:
            return initial_row(self.state_count)
        return self.rows[frame - 1]


def initial_row(state_count: int) -> list[float]:
    """State before any frame: on the leading blank with probability one."""
    row = [NEG_INF] * state_count
    row[0] = 0.0
    return row


def forward(
    frames: Frames,
    label: Sequence[int],
    *,
    tangents: Frames | None = None,
) -> ForwardTable:
    """Run the CTC forward recursion and keep every row.

    When ``tangents`` is given (one perturbation vector per frame), every row
    also carries its directional derivative along that perturbation.
    """
    width = validate_frames(frames)
    validate_label(label, width - 1 if frames else None)
    if tangents is not None:
        if len(tangents) != len(frames):
            raise InvalidInputError(
                f"tangents has {len(tangents)} frames, expected {len(frames)}"
            )
        if tangents and validate_frames(tangents, name="tangents") != width:
            raise InvalidInputError(f"tangents must have {width} entries per frame")

    frozen_label = tuple(label)
    if not frames:
        return ForwardTable(
            label=frozen_label,
            width=0,
            rows=[],
            tangents=[] if tangents is not None else None,
            log_prob=0.0 if not frozen_label else NEG_INF,
            log_prob_tangent=0.0,
        )

    symbols = build_state_symbols(frozen_label, width - 1)
    state_count = len(symbols)
    zero_frame = [0.0] * width
    rows: list[list[float]] = []
    tangent_rows: list[list[float]] = []
    last = initial_row(state_count)
    last_t = [0.0] * state_count
    for index, frame in enumerate(frames):
        frame_t = tangents[index] if tangents is not None else zero_frame
        last, last_t = _forward_step(
            last, last_t, frame, frame_t, frozen_label, symbols
        )
        rows.append(last)
        tangent_rows.append(last_t)

    if frozen_label:
        log_prob, log_prob_t = log_add_tangent(
            last[-1], last_t[-1], last[-2], last_t[-2]
        )
    else:
        log_prob, log_prob_t = last[0], last_t[0]

    return ForwardTable(
        label=frozen_label,
        width=width,
        rows=rows,
        tangents=tangent_rows if tangents is not None else None,
        log_prob=log_prob,
        log_prob_tangent=log_prob_t if tangents is not None else 0.0,
    )


def log_likelihood(frames: Frames, label: Sequence[int]) -> float:
    """Log-probability that ``frames`` collapse to ``label``."""
    return forward(frames, label).log_prob


def _forward_step(
    last: list[float],
    last_t: list[float],
    frame: Sequence[float],
    frame_t: Sequence[float],
    label: tuple[int, ...],
    symbols: list[int],
) -> tuple[list[float], list[float]]:
    state_count = len(last)
    row = [NEG_INF] * state_count
    row_t = [0.0] * state_count

    row[0] = last[0] + frame[symbols[0]]
    row_t[0] = last_t[0] + frame_t[symbols[0]]
    for state in range(1, state_count):
        value, value_t = log_add_tangent(
            last[state - 1], last_t[state - 1], last[state], last_t[state]
        )
        if state % 2 == 1 and can_skip_blank(label, (state - 1) // 2):
            value, value_t = log_add_tangent(
                last[state - 2], last_t[state - 2], value, value_t
            )
        symbol = symbols[state]
        row[state] = frame[symbol] + value
        row_t[state] = frame_t[symbol] + value_t
    return row, row_t
