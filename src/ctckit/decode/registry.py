"""Decoder registry."""

from __future__ import annotations

from ctckit.decode.base import Decoder, DecoderName
from ctckit.decode.best_path import BestPathDecoder
from ctckit.decode.prefix_search import DEFAULT_BLANK_THRESHOLD, PrefixSearchDecoder

DECODER_NAMES: tuple[DecoderName, ...] = ("best_path", "prefix_search")


def resolve_decoder(
    name: DecoderName,
    *,
    blank_threshold: float = DEFAULT_BLANK_THRESHOLD,
    beam_width: int | None = None,
) -> Decoder:
    """Resolve decoder name to a configured implementation."""
    if name == "best_path":
        return BestPathDecoder()
    if name == "prefix_search":
        return PrefixSearchDecoder(blank_threshold=blank_threshold, beam_width=beam_width)
    raise ValueError(f"Unknown decoder: {name}")
