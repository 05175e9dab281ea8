"""Request-level entry points shared by the CLI and the HTTP API."""

from __future__ import annotations

import logging

from ctckit.config import AppConfig, load_config
from ctckit.ctc import NEG_INF, forward, gradient
from ctckit.decode import resolve_decoder
from ctckit.models import DecodeRequest, DecodeResponse, ScoreRequest, ScoreResponse

logger = logging.getLogger(__name__)


def run_scoring(request: ScoreRequest) -> ScoreResponse:
    """Score a label against frames, with gradients when requested."""
    table = forward(request.frames, request.label)
    feasible = table.log_prob != NEG_INF
    frame_gradients = None
    if request.include_gradient:
        frame_gradients = gradient(
            request.frames, request.label, table, request.upstream
        ).values

    logger.debug(
        "scored label of length %d over %d frames: log_prob=%s",
        len(request.label),
        len(request.frames),
        table.log_prob,
    )
    return ScoreResponse(
        log_prob=table.log_prob if feasible else None,
        feasible=feasible,
        frame_count=len(request.frames),
        label_length=len(request.label),
        gradient=frame_gradients,
    )


def run_decoding(request: DecodeRequest, config: AppConfig | None = None) -> DecodeResponse:
    """Decode frames with the requested decoder, defaulting options from config."""
    if request.decoder == "best_path":
        decoder = resolve_decoder("best_path")
        label = decoder.decode(request.frames)
        logger.debug("best-path decoded %d frames into %d symbols", len(request.frames), len(label))
        return DecodeResponse(label=label, decoder=decoder.name, frame_count=len(request.frames))

    resolved = config or load_config()
    blank_threshold = (
        request.blank_threshold
        if request.blank_threshold is not None
        else resolved.blank_threshold
    )
    beam_width = request.beam_width or resolved.beam_width_or_none
    decoder = resolve_decoder(
        request.decoder,
        blank_threshold=blank_threshold,
        beam_width=beam_width,
    )
    label = decoder.decode(request.frames)
    logger.debug(
        "prefix search decoded %d frames into %d symbols (threshold=%s, beam=%s)",
        len(request.frames),
        len(label),
        blank_threshold,
        beam_width,
    )
    return DecodeResponse(
        label=label,
        decoder=decoder.name,
        frame_count=len(request.frames),
        blank_threshold=blank_threshold,
        beam_width=beam_width,
    )
