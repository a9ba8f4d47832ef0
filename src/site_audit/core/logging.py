"""Logging setup shared by audit runs."""
from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
# Loggers that report every HTTP request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str, log_dir: Path, log_file: str = "audit.log") -> Path:
    """Send records to stderr and to ``log_dir / log_file``; return the log file path."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / log_file

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_path, encoding="utf-8"),
        ],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return log_path
