"""Decoder interfaces."""

from __future__ import annotations

from typing import Literal, Protocol

from ctckit.ctc.trellis import Frames

DecoderName = Literal["best_path", "prefix_search"]


class Decoder(Protocol):
    """Protocol implemented by concrete label decoders."""

    name: DecoderName

    def decode(self, frames: Frames) -> list[int]:
        """Recover the most likely label from log-probability frames."""
