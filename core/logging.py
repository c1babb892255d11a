"""Centralised logging configuration for the gateway."""
from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Dict

from core.utils.env import get_env, get_env_flag

_PATH_TRIM_PREFIXES = ("/app/",)
_ORIGINAL_LOG_RECORD_FACTORY = logging.getLogRecordFactory()
_LOG_RECORD_FACTORY_CONFIGURED = False

_LOGGING_CONFIGURED = False

# Raised to WARNING unless GATEWAY_LOG_LEVEL asks for DEBUG on them explicitly.
_NOISY_LOGGERS = (
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
    "httpx",
    "multipart",
    "python_multipart",
    "python_multipart.multipart",
    "h11",
    "openai",
    "openai._base_client",
    "grpc",
)
_SILENCED_LOGGERS = ("google", "google.genai")


def _resolve_level(value: str | None, default: str) -> str:
    value = (value or "").strip().upper()
    if value and isinstance(getattr(logging, value, None), int):
        return value
    return default


def _install_log_record_factory() -> None:
    """Install a log record factory that exposes trimmed paths."""

    global _LOG_RECORD_FACTORY_CONFIGURED
    if _LOG_RECORD_FACTORY_CONFIGURED:
        return

    def factory(*args, **kwargs):
        record = _ORIGINAL_LOG_RECORD_FACTORY(*args, **kwargs)
        pathname = getattr(record, "pathname", "") or ""
        for prefix in _PATH_TRIM_PREFIXES:
            if pathname.startswith(prefix):
                record.shortpathname = pathname[len(prefix):]
                break
        else:
            record.shortpathname = pathname
        return record

    logging.setLogRecordFactory(factory)
    _LOG_RECORD_FACTORY_CONFIGURED = True


def setup_logging(force: bool = False) -> None:
    """Configure root/application loggers for console and optional file output."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED and not force:
        return

    log_level = _resolve_level(get_env("GATEWAY_LOG_LEVEL", default="INFO"), "INFO")
    console_level = _resolve_level(get_env("GATEWAY_LOG_CONSOLE_LEVEL"), log_level)
    file_level = _resolve_level(get_env("GATEWAY_LOG_FILE_LEVEL"), log_level)

    handlers: Dict[str, object] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": console_level,
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        },
    }
    root_handlers = ["console"]

    log_dir_value = get_env("GATEWAY_LOG_DIR")
    if log_dir_value:
        log_dir = Path(log_dir_value)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / (get_env("GATEWAY_LOG_FILE", default="gateway.log") or "gateway.log")
        handlers["file"] = {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "level": file_level,
            "formatter": "standard",
            "filename": str(log_file),
            "when": "midnight",
            "backupCount": int(get_env("GATEWAY_LOG_RETENTION", default="7") or "7"),
            "encoding": "utf-8",
        }
        root_handlers.append("file")

    location_fmt = "%(shortpathname)s:%(lineno)d"
    if get_env_flag("GATEWAY_LOG_TIME_MS"):
        fmt = "%(asctime)s.%(msecs)03d %(levelname)s [{location}] - %(message)s".format(location=location_fmt)
    else:
        fmt = "%(asctime)s %(levelname)s [{location}] - %(message)s".format(location=location_fmt)

    access_level = _resolve_level(get_env("GATEWAY_ACCESS_LOG_LEVEL"), "WARNING")

    config: Dict[str, object] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": fmt,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "root": {
            "level": log_level,
            "handlers": root_handlers,
        },
        "loggers": {
            "uvicorn": {
                "level": "WARNING",
                "handlers": root_handlers,
                "propagate": False,
            },
            "uvicorn.error": {
                "level": "WARNING",
                "handlers": root_handlers,
                "propagate": False,
            },
            # Request logging is handled by core.observability.request_logging
            "uvicorn.access": {
                "level": access_level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    _install_log_record_factory()

    logging.config.dictConfig(config)
    logging.captureWarnings(True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name in _SILENCED_LOGGERS:
        logging.getLogger(name).setLevel(logging.CRITICAL)

    _LOGGING_CONFIGURED = True


__all__ = ["setup_logging"]
