"""Configuration loading utilities for ctckit."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

_INT_KEYS = {"api_port", "workers", "beam_width"}
_FLOAT_KEYS = {"blank_threshold"}
_STR_KEYS = {"log_level", "api_host"}


@dataclass(frozen=True)
class AppConfig:
    """Application configuration resolved from profile + environment variables."""

    env: str
    log_level: str
    api_host: str
    api_port: int
    workers: int
    blank_threshold: float
    beam_width: int

    @property
    def beam_width_or_none(self) -> int | None:
        """Beam width for the prefix decoder; ``None`` means exact search."""
        return self.beam_width if self.beam_width > 0 else None


def load_config(env_name: str | None = None, config_dir: Path | None = None) -> AppConfig:
    """Load configuration from `configs/<env>.toml` and environment overrides."""
    env = env_name or os.getenv("CTCKIT_ENV", "dev")
    resolved_dir = config_dir or _default_config_dir()
    profile_path = resolved_dir / f"{env}.toml"

    defaults: dict[str, str | int | float] = {
        "log_level": "INFO",
        "api_host": "127.0.0.1",
        "api_port": 8000,
        "workers": 1,
        "blank_threshold": -1e-3,
        "beam_width": 0,
    }
    file_values = _load_profile(profile_path)
    defaults.update(file_values)

    log_level = os.getenv("CTCKIT_LOG_LEVEL", str(defaults["log_level"]))
    api_host = os.getenv("CTCKIT_API_HOST", str(defaults["api_host"]))
    api_port = _parse_int("CTCKIT_API_PORT", os.getenv("CTCKIT_API_PORT"), defaults["api_port"])
    workers = _parse_int("CTCKIT_WORKERS", os.getenv("CTCKIT_WORKERS"), defaults["workers"])
    blank_threshold = _parse_float(
        "CTCKIT_BLANK_THRESHOLD",
        os.getenv("CTCKIT_BLANK_THRESHOLD"),
        defaults["blank_threshold"],
    )
    beam_width = _parse_int(
        "CTCKIT_BEAM_WIDTH", os.getenv("CTCKIT_BEAM_WIDTH"), defaults["beam_width"]
    )

    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")
    if beam_width < 0:
        raise ValueError(f"beam_width must not be negative, got {beam_width}")

    return AppConfig(
        env=env,
        log_level=log_level.upper(),
        api_host=api_host,
        api_port=api_port,
        workers=workers,
        blank_threshold=blank_threshold,
        beam_width=beam_width,
    )


def _default_config_dir() -> Path:
    return Path(__file__).resolve().parents[2] / "configs"


def _load_profile(path: Path) -> dict[str, str | int | float]:
    if not path.exists():
        return {}

    with path.open("rb") as handle:
        payload = tomllib.load(handle)

    resolved: dict[str, str | int | float] = {}
    for key, raw in payload.items():
        if key in _INT_KEYS:
            resolved[key] = _coerce_int(key, raw)
        elif key in _FLOAT_KEYS:
            resolved[key] = _coerce_float(key, raw)
        elif key in _STR_KEYS:
            resolved[key] = _coerce_str(key, raw)
    return resolved


def _parse_int(name: str, raw: str | None, default: str | int | float) -> int:
    if raw is None:
        return _coerce_int(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _parse_float(name: str, raw: str | None, default: str | int | float) -> float:
    if raw is None:
        return _coerce_float(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _coerce_int(name: str, value: object) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError as exc:
            raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    raise ValueError(f"{name} must be an integer, got type {type(value).__name__}")


def _coerce_float(name: str, value: object) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as exc:
            raise ValueError(f"{name} must be a number, got {value!r}") from exc
    raise ValueError(f"{name} must be a number, got type {type(value).__name__}")


def _coerce_str(name: str, value: object) -> str:
    if isinstance(value, str):
        return value
    raise ValueError(f"{name} must be a string, got type {type(value).__name__}")
