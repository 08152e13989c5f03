# tests/test_logging.py

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from njord_build.orchestrator.logging import get_logger


def test_file_handler_added_once_per_file(tmp_path: Path):
    log_file = tmp_path / "logs" / "build.log"
    logger = get_logger("njord.test.file", log_file=log_file)
    try:
        get_logger("njord.test.file", log_file=log_file)
        get_logger("njord.test.file", log_file=tmp_path / "other.log")

        files = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(files) == 2

        logger.setLevel(logging.INFO)
        logger.info("compiled %s", "njord.css")
        for h in files:
            h.flush()
        assert "| njord.test.file | INFO | compiled njord.css" in log_file.read_text(encoding="utf-8")
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
