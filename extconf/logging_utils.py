"""Logging helpers for extconf."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from typing import Optional, Union

LOG_SUBPATH = Path("logs") / "extconf.log"
STRUCTURED_LOG_SUBPATH = Path("logs") / "extconf.jsonl"
MAX_BYTES = 2 * 1024 * 1024  # 2 MB per log segment
BACKUP_COUNT = 3
REPO_ROOT = Path(__file__).resolve().parent.parent
FALLBACK_ROOT = REPO_ROOT / ".extconf_runtime"


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        extra = getattr(record, "extra", None)
        if extra:
            log_entry["extra"] = extra
        return json.dumps(log_entry)


def setup_logging(
    site_dir: Path,
    level: Union[str, int] = logging.WARNING,
    structured: bool = False,
    console: bool = True,
) -> Path:
    """Configure the ``extconf`` logger.

    Args:
        site_dir: Site root; logs go under ``<site_dir>/logs``.
        level: Logging level (string name or int constant).
        structured: Also write JSON lines next to the text log.
        console: Attach a stderr handler.

    Returns:
        Path to the text log file.
    """
    log_path = _resolve_path(site_dir, LOG_SUBPATH)
    text_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    logger = logging.getLogger("extconf")
    _reset_handlers(logger)
    logger.setLevel(_resolve_level(level))

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(text_formatter)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(text_formatter)
        logger.addHandler(console_handler)

    if structured:
        json_handler = RotatingFileHandler(
            _resolve_path(site_dir, STRUCTURED_LOG_SUBPATH),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        json_handler.setFormatter(JSONFormatter())
        logger.addHandler(json_handler)

    logger.propagate = False
    return log_path


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return int(level)


def _resolve_path(site_dir: Path, subpath: Path) -> Path:
    primary = site_dir / subpath
    try:
        primary.parent.mkdir(parents=True, exist_ok=True)
        return primary
    except PermissionError:
        fallback = FALLBACK_ROOT / subpath
        fallback.parent.mkdir(parents=True, exist_ok=True)
        print(
            f"[logging] Unable to write logs under '{site_dir}'; "
            f"falling back to '{fallback.parent}'.",
            file=sys.stderr,
        )
        return fallback


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


__all__ = ["setup_logging", "JSONFormatter", "LOG_SUBPATH", "STRUCTURED_LOG_SUBPATH", "FALLBACK_ROOT"]
