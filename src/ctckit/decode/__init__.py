"""Label decoders."""

from ctckit.decode.base import Decoder, DecoderName
from ctckit.decode.best_path import BestPathDecoder, best_path
from ctckit.decode.prefix_search import (
    DEFAULT_BLANK_THRESHOLD,
    PrefixSearchDecoder,
    prefix_search,
    split_runs,
)
from ctckit.decode.registry import DECODER_NAMES, resolve_decoder

__all__ = [
    "DECODER_NAMES",
    "DEFAULT_BLANK_THRESHOLD",
    "BestPathDecoder",
    "Decoder",
    "DecoderName",
    "PrefixSearchDecoder",
    "best_path",
    "prefix_search",
    "resolve_decoder",
    "split_runs",
]
