"""Logging configuration using structlog.

Console lines look like:
    12:30:45 INF tesseract ready language=chi_tra version=5.3.0
    12:30:46 DBG frame processed ocr_ms=212 words=14 total_ms=240
    12:30:47 WRN unknown language value=ChiXyz fallback=ChiTra
    12:30:48 ERR capture failed err="XGetImage() failed"

Output goes to stdout by default. configure() takes a stream so the
headless `--image` mode can send log lines to stderr and keep stdout for
the recognized words.
"""

import logging
import sys
from datetime import datetime
from typing import TextIO

import structlog

LEVEL_NAMES = {
    "debug": "DBG",
    "info": "INF",
    "warning": "WRN",
    "error": "ERR",
    "critical": "CRT",
}

_debug_enabled = False


def _level_to_3letter(logger, method_name, event_dict):
    level = event_dict.get("level", method_name)
    event_dict["level"] = LEVEL_NAMES.get(level, level.upper()[:3])
    return event_dict


def _format_timestamp(logger, method_name, event_dict):
    event_dict["timestamp"] = datetime.now().strftime("%H:%M:%S")
    return event_dict


def _render_kv_pairs(logger, method_name, event_dict):
    """Render as 'timestamp LVL event key=value ...'."""
    timestamp = event_dict.pop("timestamp", "")
    level = event_dict.pop("level", "???")
    event = event_dict.pop("event", "")

    kv_parts = []
    for key, value in event_dict.items():
        if key.startswith("_"):
            continue
        if isinstance(value, str) and " " in value:
            kv_parts.append(f'{key}="{value}"')
        else:
            kv_parts.append(f"{key}={value}")

    if kv_parts:
        return f"{timestamp} {level} {event} {' '.join(kv_parts)}"
    return f"{timestamp} {level} {event}"


def configure(level: str = "INFO", debug: bool = False, stream: TextIO | None = None) -> None:
    """Configure structlog for console output.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        debug: Shortcut for level="DEBUG".
        stream: Output stream, stdout when omitted.
    """
    global _debug_enabled
    if debug:
        level = "DEBUG"
    _debug_enabled = level.upper() == "DEBUG"

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            _format_timestamp,
            _level_to_3letter,
            _render_kv_pairs,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, optionally bound to a component name."""
    logger = structlog.get_logger()
    if name:
        return logger.bind(logger=name)
    return logger


def is_debug_enabled() -> bool:
    """Check if debug logging is enabled."""
    return _debug_enabled
