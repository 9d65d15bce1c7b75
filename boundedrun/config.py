from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .parallel.interval_limiter import IntervalLimiter
from .parallel.poll import PollConfig
from .parallel.runner import ChunkedRunner, Limiter
from .utils.logging_config import setup_logging

ENV_PREFIX = "BOUNDEDRUN_"

_KNOWN_KEYS = {
    "chunk_size",
    "flatten",
    "limit",
    "interval_ms",
    "poll_interval_ms",
    "poll_wait",
    "max_attempts",
    "log_level",
    "log_file",
}


@dataclass
class Settings:
    chunk_size: int | None = None
    flatten: bool = False
    limit: int | None = None
    interval_ms: float = 60_000.0
    poll_interval_ms: float = 1000.0
    poll_wait: Any = False
    max_attempts: int | None = None
    log_level: str = "INFO"
    log_file: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def build_limiter(self) -> IntervalLimiter | None:
        if self.limit is None:
            return None
        return IntervalLimiter(limit=self.limit, interval_ms=self.interval_ms)

    def build_runner(self, limiter: Limiter | None = None) -> ChunkedRunner:
        return ChunkedRunner(
            chunk_size=self.chunk_size,
            limiter=limiter if limiter is not None else self.build_limiter(),
            flatten=self.flatten,
        )

    def configure_logging(self) -> None:
        setup_logging(self.log_level, log_file=self.log_file)

    def poll_config(self) -> PollConfig:
        return PollConfig(
            interval_ms=self.poll_interval_ms,
            wait=self.poll_wait,
            max_attempts=self.max_attempts,
        )


def _env(name: str) -> str | None:
    value = os.getenv(ENV_PREFIX + name)
    return value if value not in (None, "") else None


def _apply_env_overrides(settings: Settings) -> None:
    converters = {
        "chunk_size": int,
        "limit": int,
        "interval_ms": float,
        "poll_interval_ms": float,
        "max_attempts": int,
        "log_level": str,
        "log_file": str,
        "flatten": lambda value: value.lower() in ("1", "true", "yes"),
    }
    for name, convert in converters.items():
        value = _env(name.upper())
        if value is not None:
            setattr(settings, name, convert(value))


def load_settings(
    path: str | Path | None = None,
    env_file: str | Path | None = None,
    apply_logging: bool = False,
) -> Settings:
    """
    Build Settings from an optional YAML file, then BOUNDEDRUN_* env vars.

    Environment values win over the file. When ``env_file`` is given it is
    loaded with python-dotenv first (existing variables are not overridden).
    With ``apply_logging`` the resulting log settings are applied at once.
    """
    if env_file is not None:
        load_dotenv(env_file)

    data: dict[str, Any] = {}
    if path is not None:
        data = yaml.safe_load(Path(path).read_text()) or {}

    settings = Settings(
        chunk_size=data.get("chunk_size"),
        flatten=bool(data.get("flatten", False)),
        limit=data.get("limit"),
        interval_ms=data.get("interval_ms", 60_000.0),
        poll_interval_ms=data.get("poll_interval_ms", 1000.0),
        poll_wait=data.get("poll_wait", False),
        max_attempts=data.get("max_attempts"),
        log_level=data.get("log_level", "INFO"),
        log_file=data.get("log_file"),
        extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
    )
    _apply_env_overrides(settings)
    if apply_logging:
        settings.configure_logging()
    return settings
