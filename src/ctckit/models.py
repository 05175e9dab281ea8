"""Shared data models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

DecoderChoice = Literal["best_path", "prefix_search"]


class HealthResponse(BaseModel):
    """Response payload for the API health endpoint."""

    status: Literal["ok"]
    version: str
    env: str


class ScoreRequest(BaseModel):
    """Likelihood request payload used by both CLI and API.

    ``frames`` hold natural-log probabilities with the blank symbol last.
    """

    frames: list[list[float]]
    label: list[int] = Field(default_factory=list)
    include_gradient: bool = False
    upstream: float = 1.0


class ScoreResponse(BaseModel):
    """Log-likelihood of a label, optionally with per-frame gradients.

    ``log_prob`` is ``None`` when the label has probability zero.
    """

    log_prob: float | None
    feasible: bool
    frame_count: int = Field(ge=0)
    label_length: int = Field(ge=0)
    gradient: list[list[float]] | None = None


class DecodeRequest(BaseModel):
    """Decoding request payload used by both CLI and API."""

    frames: list[list[float]]
    decoder: DecoderChoice = "best_path"
    blank_threshold: float | None = Field(default=None, le=0.0)
    beam_width: int | None = Field(default=None, ge=1)


class DecodeResponse(BaseModel):
    """Decoded label with the settings that produced it."""

    label: list[int]
    decoder: DecoderChoice
    frame_count: int = Field(ge=0)
    blank_threshold: float | None = None
    beam_width: int | None = None
