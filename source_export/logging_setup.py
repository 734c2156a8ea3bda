"""
Настройка логирования.

- уровень берётся из аргумента, затем из SOURCE_EXPORT_LOG_LEVEL / LOG_LEVEL;
- вывод в stderr в человекочитаемом виде;
- опционально файл с ротацией;
- дополнительный уровень TRACE для трассировки отдельных правил.
"""
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(log_level: Optional[str]) -> int:
    level_str = (
        log_level
        or os.environ.get("SOURCE_EXPORT_LOG_LEVEL")
        or os.environ.get("LOG_LEVEL", "INFO")
    )
    if level_str.upper() == "TRACE":
        return TRACE_LEVEL
    return getattr(logging, level_str.upper(), logging.INFO)


def configure_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str | Path] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> int:
    """
    Настраивает корневой логгер пакета и возвращает выбранный уровень.

    Повторный вызов заменяет ранее добавленные обработчики, а не дублирует их.
    """
    level = _resolve_level(log_level)
    pkg_logger = logging.getLogger("source_export")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
        h.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    pkg_logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(str(path), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        pkg_logger.addHandler(fh)

    pkg_logger.setLevel(level)
    pkg_logger.debug(f"Logging configured - Level: {logging.getLevelName(level)}")
    return level


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
