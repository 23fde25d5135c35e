"""Logging for the vidsum pipeline.

Pipeline transitions, adapters and the reclaim sweep all log under the
`vidsum` logger tree. `setup_logging` attaches a console handler and a
rotating `vidsum.log` under `Settings.log_dir`, leaving framework loggers
(uvicorn, fastapi) alone.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from vidsum.config import LoggingSettings, Settings

_ROOT_LOGGER = "vidsum"
_CONFIGURED_ATTR = "_vidsum_configured"

# Third-party loggers that log every request at INFO; providers already log each inference call.
_QUIET_BY_DEFAULT = ("httpx", "httpcore", "google.auth", "urllib3")


def _level(name: str | None, default: int = logging.INFO) -> int:
    value = logging.getLevelName(str(name or "").upper())
    return value if isinstance(value, int) else default


def log_file_path(settings: Settings) -> Path | None:
    """Resolve the log file location, or None when file logging is disabled."""
    raw = str(settings.logging.file or "").strip()
    if not raw:
        return None
    path = Path(raw)
    if not path.is_absolute():
        path = Path(settings.log_dir) / path
    return path


def _build_handlers(settings: Settings, formatter: logging.Formatter) -> list[logging.Handler]:
    cfg: LoggingSettings = settings.logging
    handlers: list[logging.Handler] = []
    if cfg.console:
        handlers.append(logging.StreamHandler())

    path = log_file_path(settings)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=int(cfg.max_bytes),
                backupCount=int(cfg.backup_count),
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(settings: Settings) -> None:
    """Configure the `vidsum` logger tree once per process."""
    logger = logging.getLogger(_ROOT_LOGGER)
    if getattr(logger, _CONFIGURED_ATTR, False):
        return

    cfg = settings.logging
    level = _level(cfg.level)
    formatter = logging.Formatter(fmt=str(cfg.format), datefmt=str(cfg.datefmt))

    logger.setLevel(level)
    logger.handlers = _build_handlers(settings, formatter)
    logger.propagate = False
    setattr(logger, _CONFIGURED_ATTR, True)

    for name in _QUIET_BY_DEFAULT:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    for name, override in (cfg.levels or {}).items():
        logging.getLogger(str(name)).setLevel(_level(override, level))

    logger.debug("logging configured (level=%s, file=%s)", logging.getLevelName(level), log_file_path(settings))
