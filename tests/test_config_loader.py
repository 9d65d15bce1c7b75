import logging
import os
from unittest.mock import patch

import pytest

from boundedrun.config import Settings, load_settings
from boundedrun.parallel.interval_limiter import IntervalLimiter


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    for name in (
        "CHUNK_SIZE",
        "LIMIT",
        "INTERVAL_MS",
        "POLL_INTERVAL_MS",
        "MAX_ATTEMPTS",
        "LOG_LEVEL",
        "LOG_FILE",
        "FLATTEN",
    ):
        monkeypatch.delenv(f"BOUNDEDRUN_{name}", raising=False)


def test_load_settings_from_yaml(tmp_path):
    yaml_text = """
chunk_size: 5
limit: 20
interval_ms: 1000
max_attempts: 3
extra_field: value
"""
    cfg_path = tmp_path / "settings.yaml"
    cfg_path.write_text(yaml_text)
    settings = load_settings(cfg_path)
    assert settings.chunk_size == 5
    assert settings.limit == 20
    assert settings.interval_ms == 1000
    assert settings.max_attempts == 3
    assert settings.log_level == "INFO"
    assert settings.extra["extra_field"] == "value"


def test_defaults_without_file():
    settings = load_settings()
    assert settings == Settings()
    assert settings.build_limiter() is None


def test_env_overrides_file(tmp_path, monkeypatch):
    cfg_path = tmp_path / "settings.yaml"
    cfg_path.write_text("chunk_size: 5\n")
    monkeypatch.setenv("BOUNDEDRUN_CHUNK_SIZE", "8")
    monkeypatch.setenv("BOUNDEDRUN_FLATTEN", "true")
    settings = load_settings(cfg_path)
    assert settings.chunk_size == 8
    assert settings.flatten is True


def test_dotenv_file(tmp_path):
    env_path = tmp_path / ".env"
    env_path.write_text("BOUNDEDRUN_LIMIT=7\nBOUNDEDRUN_LOG_LEVEL=DEBUG\n")
    try:
        settings = load_settings(env_file=env_path)
    finally:
        os.environ.pop("BOUNDEDRUN_LIMIT", None)
        os.environ.pop("BOUNDEDRUN_LOG_LEVEL", None)
    assert settings.limit == 7
    assert settings.log_level == "DEBUG"


def test_builders():
    settings = Settings(chunk_size=4, limit=10, interval_ms=500, max_attempts=2)

    runner = settings.build_runner()
    assert runner.config.chunk_size == 4
    assert isinstance(runner.limiter, IntervalLimiter)
    assert runner.limiter.config.limit == 10

    poll_config = settings.poll_config()
    assert poll_config.max_attempts == 2
    assert poll_config.interval_ms == 1000.0


def test_env_log_level_reaches_basic_config(monkeypatch):
    monkeypatch.setenv("BOUNDEDRUN_LOG_LEVEL", "DEBUG")
    with patch("logging.basicConfig") as basic_config:
        settings = load_settings(apply_logging=True)

    assert settings.log_level == "DEBUG"
    basic_config.assert_called_once()
    assert basic_config.call_args.kwargs["level"] == logging.DEBUG


def test_configure_logging_uses_log_file(tmp_path):
    log_file = tmp_path / "logs" / "runs.log"
    settings = Settings(log_level="warning", log_file=str(log_file))
    with patch("logging.basicConfig") as basic_config:
        settings.configure_logging()

    kwargs = basic_config.call_args.kwargs
    assert kwargs["level"] == logging.WARNING
    assert kwargs["filename"] == str(log_file)


def test_load_settings_leaves_logging_alone_by_default(monkeypatch):
    monkeypatch.setenv("BOUNDEDRUN_LOG_LEVEL", "DEBUG")
    with patch("logging.basicConfig") as basic_config:
        load_settings()
    assert not basic_config.called
