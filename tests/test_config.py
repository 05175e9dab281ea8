from pathlib import Path

import pytest

from ctckit.config import load_config

_ENV_KEYS = (
    "CTCKIT_ENV",
    "CTCKIT_LOG_LEVEL",
    "CTCKIT_API_HOST",
    "CTCKIT_API_PORT",
    "CTCKIT_WORKERS",
    "CTCKIT_BLANK_THRESHOLD",
    "CTCKIT_BEAM_WIDTH",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_load_dev_profile() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    config = load_config("dev", config_dir=repo_root / "configs")

    assert config.env == "dev"
    assert config.log_level == "DEBUG"
    assert config.api_host == "127.0.0.1"
    assert config.api_port == 8000
    assert config.workers == 1
    assert config.blank_threshold == -1e-3
    assert config.beam_width == 0
    assert config.beam_width_or_none is None


def test_env_override(monkeypatch) -> None:
    monkeypatch.setenv("CTCKIT_ENV", "prod")
    monkeypatch.setenv("CTCKIT_API_PORT", "9000")
    monkeypatch.setenv("CTCKIT_BLANK_THRESHOLD", "-0.05")

    repo_root = Path(__file__).resolve().parents[1]
    config = load_config(config_dir=repo_root / "configs")

    assert config.env == "prod"
    assert config.api_port == 9000
    assert config.blank_threshold == -0.05
    assert config.beam_width_or_none is None


def test_missing_profile_uses_defaults(tmp_path: Path) -> None:
    config = load_config("staging", config_dir=tmp_path)

    assert config.env == "staging"
    assert config.log_level == "INFO"
    assert config.workers == 1


def test_invalid_values_raise(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CTCKIT_WORKERS", "many")
    with pytest.raises(ValueError, match="CTCKIT_WORKERS"):
        load_config("dev", config_dir=tmp_path)

    monkeypatch.delenv("CTCKIT_WORKERS")
    (tmp_path / "dev.toml").write_text('beam_width = "wide"\n', encoding="utf-8")
    with pytest.raises(ValueError, match="beam_width"):
        load_config("dev", config_dir=tmp_path)


def test_negative_beam_width_is_rejected(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CTCKIT_BEAM_WIDTH", "-3")

    with pytest.raises(ValueError, match="beam_width"):
        load_config("dev", config_dir=tmp_path)


def test_prod_beam_is_opt_in(monkeypatch) -> None:
    monkeypatch.setenv("CTCKIT_ENV", "prod")
    monkeypatch.setenv("CTCKIT_BEAM_WIDTH", "64")

    repo_root = Path(__file__).resolve().parents[1]
    config = load_config(config_dir=repo_root / "configs")

    assert config.beam_width_or_none == 64
