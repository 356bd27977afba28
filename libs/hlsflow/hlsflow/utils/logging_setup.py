"""Logging initialization for the api, the worker and local scripts."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from hlsflow.config import LoggingSettings, Settings

_ROOT_LOGGER = "hlsflow"
_CONFIGURED_FLAG = "_hlsflow_configured"


def _level(name: str | None, default: int = logging.INFO) -> int:
    value = getattr(logging, str(name or "").upper(), None)
    return value if isinstance(value, int) else default


def _log_file_path(cfg: LoggingSettings, log_dir: str) -> Path | None:
    if not cfg.file:
        return None
    path = Path(str(cfg.file))
    return path if path.is_absolute() else Path(log_dir) / path


def _build_handlers(cfg: LoggingSettings, log_dir: str) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt=cfg.format, datefmt=cfg.datefmt)
    handlers: list[logging.Handler] = []
    if cfg.console:
        handlers.append(logging.StreamHandler())

    file_path = _log_file_path(cfg, log_dir)
    if file_path is not None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                file_path,
                maxBytes=cfg.max_bytes,
                backupCount=cfg.backup_count,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def quiet_sdk_loggers(cfg: LoggingSettings) -> None:
    """Raise the threshold of chatty storage SDK loggers (botocore, google-auth)."""
    level = _level(cfg.quiet_level, logging.WARNING)
    for name in cfg.quiet_loggers:
        logging.getLogger(name).setLevel(level)


def setup_logging(settings: Settings) -> None:
    """Attach console/file handlers to the ``hlsflow`` logger tree.

    Idempotent: the api lifespan and the worker may both call it in one process.
    Framework loggers (uvicorn) keep their own handlers.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    if getattr(logger, _CONFIGURED_FLAG, False):
        return

    cfg = settings.logging
    level = _level(cfg.level)
    handlers = _build_handlers(cfg, settings.log_dir)
    for handler in handlers:
        handler.setLevel(level)

    logger.setLevel(level)
    logger.handlers = handlers
    logger.propagate = False
    quiet_sdk_loggers(cfg)
    setattr(logger, _CONFIGURED_FLAG, True)
