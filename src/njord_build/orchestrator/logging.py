from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import os


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
_configured = False


def _ensure_base_logger() -> None:
    global _configured
    if _configured:
        return
    level = os.getenv("NJORD_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )
    _configured = True


def configure_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """Apply CLI logging options on top of the env-driven defaults."""
    _ensure_base_logger()
    root = logging.getLogger("njord")
    if verbose:
        root.setLevel(logging.DEBUG)
    if log_file is not None:
        get_logger("njord", log_file=log_file)


def _has_file_handler(logger: logging.Logger, log_file: Path) -> bool:
    target = os.path.abspath(log_file)
    return any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == target
        for h in logger.handlers
    )


def get_logger(name: str, log_file: Path | None = None) -> logging.Logger:
    """Logger under the shared console setup, optionally also writing to `log_file`."""
    _ensure_base_logger()
    logger = logging.getLogger(name)
    if log_file is None or _has_file_handler(logger, log_file):
        return logger
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
