from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "[%(levelname)s] %(name)s - %(message)s"
PACKAGE_LOGGER = "boundedrun"


def resolve_level(level: str | int) -> int:
    """Map a level name or number to a logging level; unknown names give INFO."""
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def setup_logging(
    level: str | int = "INFO",
    log_file: str | None = None,
    package_level: str | int | None = None,
) -> None:
    """
    Configure logging for chunked runs and polls.

    Parameters
    ----------
    level:
        Root logging level name or number (e.g., "INFO", "DEBUG").
    log_file:
        Optional path to log output. When not provided, logs go to stderr.
    package_level:
        Optional level for ``boundedrun.*`` loggers only, so per-chunk and
        per-attempt debug lines can be enabled without a noisy root logger.
    """

    log_kwargs = {
        "level": resolve_level(level),
        "format": LOG_FORMAT,
    }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        log_kwargs["filename"] = log_file

    logging.basicConfig(**log_kwargs)

    if package_level is not None:
        logging.getLogger(PACKAGE_LOGGER).setLevel(resolve_level(package_level))
