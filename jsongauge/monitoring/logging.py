"""Structured logging with context injection.

Features:
- console handler
- optional file handler
- JSON logs optional (easy ingestion)
- context injection (namespace/file_group/metric) without needing a big framework
"""

from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

ROOT_LOGGER = "jsongauge"
CONTEXT_FIELDS = ("namespace", "file_group", "metric")

# ---------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in (*CONTEXT_FIELDS, "event"):
            if hasattr(record, k):
                base[k] = getattr(record, k)

        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)

        # allow structured payload
        payload = getattr(record, "payload", None)
        if isinstance(payload, dict):
            base["payload"] = payload

        return json.dumps(base, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Format log records as human-readable text."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [self.formatTime(record), record.levelname, record.name]

        ctx = [
            f"{k}={getattr(record, k)}"
            for k in CONTEXT_FIELDS
            if getattr(record, k, None)
        ]
        if ctx:
            parts.append("[" + " ".join(ctx) + "]")

        parts.append(record.getMessage())
        s = " ".join(parts)

        if record.exc_info:
            s += "\n" + self.formatException(record.exc_info)

        return s


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingOptions:
    """Configure logging behavior for the exporter process."""

    level: str = "INFO"
    json_logs: bool = False

    enable_console: bool = True
    log_file: Path | None = None


def setup_logging(options: LoggingOptions | None = None) -> logging.Logger:
    """Configure the package logger; repeated calls replace earlier handlers."""
    options = options or LoggingOptions()
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, options.level.upper(), logging.INFO))
    logger.propagate = False

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    fmt = JsonFormatter() if options.json_logs else TextFormatter()

    if options.enable_console:
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(logger.level)
        ch.setFormatter(fmt)
        logger.addHandler(ch)

    if options.log_file is not None:
        options.log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(options.log_file, encoding="utf-8")
        fh.setLevel(logger.level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


# ---------------------------------------------------------------------
# Context injection
# ---------------------------------------------------------------------


class ContextAdapter(logging.LoggerAdapter):
    """Inject context fields into log records."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        merged = dict(self.extra)
        merged.update(extra)
        kwargs["extra"] = merged
        return msg, kwargs


def with_context(
    logger: logging.Logger | logging.LoggerAdapter,
    *,
    namespace: str | None = None,
    file_group: str | None = None,
    metric: str | None = None,
) -> ContextAdapter:
    """Create a context adapter carrying namespace, file group and metric info."""
    extra: dict[str, Any] = {}
    if isinstance(logger, logging.LoggerAdapter):
        extra.update(logger.extra or {})
        logger = logger.logger
    if namespace:
        extra["namespace"] = namespace
    if file_group:
        extra["file_group"] = file_group
    if metric:
        extra["metric"] = metric
    return ContextAdapter(logger, extra)
