"""Unit tests for configuration management."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from voiceid.utils.config import (
    Config,
    Settings,
    apply_settings,
    load_config,
    save_config,
)

REPO_CONFIG = Path(__file__).resolve().parents[2] / "configs" / "default.yaml"


def test_default_values():
    """Defaults match the recommended calibration."""
    config = Config()

    assert config.audio.sample_rate == 16000
    assert config.speaker.embedding_dim == 192
    assert config.speaker.extractor == "speechbrain"
    assert config.enrollment.min_samples == 3
    assert config.enrollment.variance_threshold == pytest.approx(0.15)
    assert config.identification.recognition_threshold == pytest.approx(0.70)


def test_load_shipped_config():
    """The shipped YAML loads and agrees with the defaults."""
    config = load_config(REPO_CONFIG)

    assert isinstance(config, Config)
    assert config.identification.recognition_threshold == pytest.approx(0.70)
    assert config.enrollment.variance_threshold == pytest.approx(0.15)
    assert config.storage.db_path == Path("data/voice_profiles.db")


def test_missing_config_uses_defaults(tmp_path):
    config = load_config(tmp_path / "missing.yaml")

    assert config == Config()


def test_partial_config(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("identification:\n  recognition_threshold: 0.8\n")

    config = load_config(path)

    assert config.identification.recognition_threshold == pytest.approx(0.8)
    assert config.enrollment.min_samples == 3


def test_empty_config_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(path) == Config()


def test_invalid_values_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("identification:\n  recognition_threshold: 1.5\n")

    with pytest.raises(ValidationError):
        load_config(path)


def test_save_and_reload(tmp_path):
    config = Config()
    config.identification.recognition_threshold = 0.75
    config.storage.db_path = tmp_path / "profiles.db"
    path = tmp_path / "saved.yaml"

    save_config(config, path)

    assert load_config(path) == config


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("VOICEID_DB_PATH", "/tmp/other.db")
    monkeypatch.setenv("VOICEID_EXTRACTOR", "simulated")
    monkeypatch.setenv("VOICEID_LOG_LEVEL", "DEBUG")

    settings = Settings()

    assert settings.db_path == Path("/tmp/other.db")
    assert settings.extractor == "simulated"
    assert settings.log_level == "DEBUG"


def test_apply_settings_overrides_config(monkeypatch):
    monkeypatch.setenv("VOICEID_DB_PATH", "/tmp/other.db")
    config = Config()

    merged = apply_settings(config, Settings())

    assert merged.storage.db_path == Path("/tmp/other.db")
    assert merged.speaker.extractor == "speechbrain"
    assert config.storage.db_path == Path("data/voice_profiles.db")
