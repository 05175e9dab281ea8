"""CTC likelihood and gradient engines."""

from ctckit.ctc.gradient import FrameGradients, gradient
from ctckit.ctc.logspace import (
    NEG_INF,
    log_add,
    log_add_grad,
    log_add_grad_tangent,
    log_add_tangent,
)
from ctckit.ctc.trellis import (
    ForwardTable,
    build_state_symbols,
    forward,
    log_likelihood,
    validate_frames,
    validate_label,
)

__all__ = [
    "NEG_INF",
    "ForwardTable",
    "FrameGradients",
    "build_state_symbols",
    "forward",
    "gradient",
    "log_add",
    "log_add_grad",
    "log_add_grad_tangent",
    "log_add_tangent",
    "log_likelihood",
    "validate_frames",
    "validate_label",
]
