"""Logging setup driven by the ``logging`` section of the config."""
from __future__ import annotations

import logging.config
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_logging_config(section: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    section = section or {}
    level = str(section.get("level", "INFO")).upper()
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "standard",
        }
    }
    log_file = section.get("file")
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "standard",
            "filename": str(log_file),
            "maxBytes": int(section.get("max_bytes", 1048576)),
            "backupCount": int(section.get("backup_count", 3)),
            "encoding": "utf8",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": {"format": section.get("format", DEFAULT_FORMAT)}},
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
    }


def configure_logging(section: Optional[Dict[str, Any]] = None) -> None:
    if section is not None and not section.get("enabled", True):
        return
    logging.config.dictConfig(build_logging_config(section))


__all__ = ["build_logging_config", "configure_logging"]
