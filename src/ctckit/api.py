"""HTTP API for ctckit."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException

from ctckit import __version__
from ctckit.config import load_config
from ctckit.core import run_decoding, run_scoring
from ctckit.models import (
    DecodeRequest,
    DecodeResponse,
    HealthResponse,
    ScoreRequest,
    ScoreResponse,
)


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="ctckit",
        version=__version__,
        description="CTC likelihood, gradient and decoding service API.",
    )
    config = load_config()

    @app.get("/health", response_model=HealthResponse, tags=["system"])
    def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__, env=config.env)

    @app.post("/v1/score", response_model=ScoreResponse, tags=["likelihood"])
    def score(request: ScoreRequest) -> ScoreResponse:
        try:
            return run_scoring(request)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    @app.post("/v1/decode", response_model=DecodeResponse, tags=["decoding"])
    def decode(request: DecodeRequest) -> DecodeResponse:
        try:
            return run_decoding(request, config)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    return app


app = create_app()
