"""Reverse pass of the CTC forward recursion.

The gradient of ``log p(label | frames)`` with respect to every input
log-probability is obtained by walking the retained forward table backwards,
undoing one frame at a time. When the table carries tangents, every gradient
entry also gets its directional derivative, which is what curvature-based
optimizers consume as a Hessian-vector product.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ctckit.ctc.logspace import NEG_INF, log_add_grad_tangent, log_add_tangent
from ctckit.ctc.trellis import (
    Frames,
    ForwardTable,
    build_state_symbols,
    can_skip_blank,
    forward,
)
from ctckit.errors import InvalidInputError


@dataclass(frozen=True)
class FrameGradients:
    """Per-frame partials of ``upstream * log_prob``.

    ``values[t][k]`` is the partial with respect to ``frames[t][k]``;
    ``tangents`` mirrors ``values`` when the forward table was built with
    tangents and is ``None`` otherwise.
    """

    log_prob: float
    values: list[list[float]]
    tangents: list[list[float]] | None


def gradient(
    frames: Frames,
    label: Sequence[int],
    table: ForwardTable | None = None,
    upstream: float = 1.0,
    *,
    upstream_tangent: float = 0.0,
) -> FrameGradients:
    """Differentiate the log-likelihood with respect to every frame entry.

    ``table`` is the result of :func:`ctckit.ctc.trellis.forward` for the same
    inputs; it is computed here when omitted. The same table can be reused for
    any ``upstream`` scalar.
    """
    if table is None:
        table = forward(frames, label)
    elif table.label != tuple(label) or len(table.rows) != len(frames):
        raise InvalidInputError("forward table does not belong to these frames and label")

    with_tangents = table.tangents is not None
    if not frames:
        return FrameGradients(
            log_prob=table.log_prob,
            values=[],
            tangents=[] if with_tangents else None,
        )

    labels = table.label
    width = table.width
    symbols = build_state_symbols(labels, width - 1)
    state_count = len(symbols)
    zero_row = [0.0] * state_count

    upstream_row = [0.0] * state_count
    upstream_row_t = [0.0] * state_count
    last = table.rows[-1]
    last_t = table.tangents[-1] if table.tangents is not None else zero_row
    if labels:
        da, da_t, db, db_t = log_add_grad_tangent(
            last[-1], last_t[-1], last[-2], last_t[-2], upstream, upstream_tangent
        )
        upstream_row[-1], upstream_row_t[-1] = da, da_t
        upstream_row[-2], upstream_row_t[-2] = db, db_t
    elif last[0] != NEG_INF:
        upstream_row[0], upstream_row_t[0] = upstream, upstream_tangent

    values: list[list[float]] = [[] for _ in frames]
    tangents: list[list[float]] = [[] for _ in frames]
    for index in range(len(frames) - 1, -1, -1):
        old = table.previous_row(index)
        if table.tangents is not None and index > 0:
            old_t = table.tangents[index - 1]
        else:
            old_t = zero_row
        (
            values[index],
            tangents[index],
            upstream_row,
            upstream_row_t,
        ) = _backward_step(
            old, old_t, upstream_row, upstream_row_t, labels, symbols, width
        )

    return FrameGradients(
        log_prob=table.log_prob,
        values=values,
        tangents=tangents if with_tangents else None,
    )


def _backward_step(
    old: list[float],
    old_t: list[float],
    upstream: list[float],
    upstream_t: list[float],
    label: tuple[int, ...],
    symbols: list[int],
    width: int,
) -> tuple[list[float], list[float], list[float], list[float]]:
    state_count = len(old)
    frame_grad = [0.0] * width
    frame_grad_t = [0.0] * width
    old_grad = [0.0] * state_count
    old_grad_t = [0.0] * state_count

    old_grad[0] = upstream[0]
    old_grad_t[0] = upstream_t[0]
    frame_grad[symbols[0]] = upstream[0]
    frame_grad_t[symbols[0]] = upstream_t[0]

    for state in range(1, state_count):
        symbol = symbols[state]
        frame_grad[symbol] += upstream[state]
        frame_grad_t[symbol] += upstream_t[state]

        hold_grad, hold_grad_t = upstream[state], upstream_t[state]
        if state % 2 == 1 and can_skip_blank(label, (state - 1) // 2):
            inner, inner_t = log_add_tangent(
                old[state - 1], old_t[state - 1], old[state], old_t[state]
            )
            skip, skip_t, hold_grad, hold_grad_t = log_add_grad_tangent(
                old[state - 2], old_t[state - 2], inner, inner_t, hold_grad, hold_grad_t
            )
            old_grad[state - 2] += skip
            old_grad_t[state - 2] += skip_t

        da, da_t, db, db_t = log_add_grad_tangent(
            old[state - 1],
            old_t[state - 1],
            old[state],
            old_t[state],
            hold_grad,
            hold_grad_t,
        )
        old_grad[state - 1] += da
        old_grad_t[state - 1] += da_t
        old_grad[state] += db
        old_grad_t[state] += db_t

    return frame_grad, frame_grad_t, old_grad, old_grad_t
