"""Logging initialization helpers."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from markflow.config import LoggingSettings, Settings

_PACKAGE_LOGGER = "markflow"
_CONFIGURED_ATTR = "_markflow_configured"

# Per-request lines from the HTTP client drown out pipeline warnings.
_NOISY_LOGGERS = ("httpx", "httpcore")


def _file_handler(cfg: LoggingSettings, log_dir: str, formatter: logging.Formatter) -> logging.Handler:
    path = Path(str(cfg.file))
    if not path.is_absolute():
        path = Path(log_dir) / path
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=int(cfg.max_bytes),
        backupCount=int(cfg.backup_count),
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(settings: Settings, *, force: bool = False) -> logging.Logger:
    """Attach handlers to the `markflow` logger.

    Only the package logger is touched, so host applications keep their own
    logging setup. Calling it again is a no-op unless `force` is set.
    """
    logger = logging.getLogger(_PACKAGE_LOGGER)
    if getattr(logger, _CONFIGURED_ATTR, False) and not force:
        return logger

    cfg = settings.logging
    level = logging.getLevelName(str(cfg.level or "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter(fmt=str(cfg.format), datefmt=str(cfg.datefmt))
    handlers: list[logging.Handler] = []
    if cfg.console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        handlers.append(console)
    if cfg.file:
        handlers.append(_file_handler(cfg, settings.log_dir, formatter))

    for handler in handlers:
        handler.setLevel(level)
    for handler in logger.handlers:
        handler.close()

    logger.setLevel(level)
    logger.handlers = handlers
    logger.propagate = False
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    setattr(logger, _CONFIGURED_ATTR, True)
    return logger
