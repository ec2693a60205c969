"""JSON logging for engine runs.

Every record is a single JSON object. Fields bound on a ``StructuredLogger``
and the fields of the active run context (run id, seed) are merged into it.
"""
from __future__ import annotations

import json
import logging
import logging.config
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseSettings):
    """Logging configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    level: str = Field(default="INFO", alias="LOG_LEVEL")
    stream: Literal["stdout", "stderr"] = Field(default="stderr", alias="LOG_STREAM")
    json_indent: Optional[int] = Field(default=None, alias="LOG_JSON_INDENT")

    @property
    def normalized_level(self) -> str:
        return self.level.upper()


_RUN_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("run_context", default={})
_configured = False
_RESERVED_KEYS = {"exc_info", "stack_info", "stacklevel", "extra"}


class JSONFormatter(logging.Formatter):
    """Render a record, its bound fields and the run context as one JSON line."""

    def __init__(self, *, indent: Optional[int] = None) -> None:
        super().__init__()
        self.indent = indent

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(_RUN_CONTEXT.get())
        payload.update(getattr(record, "context_data", None) or {})

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, indent=self.indent, default=str)


def setup_logging(config: Optional[LoggingConfig] = None) -> LoggingConfig:
    """Route the root logger through the JSON formatter; later calls are no-ops."""

    global _configured

    config = config or LoggingConfig()
    if _configured:
        return config

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": JSONFormatter, "indent": config.json_indent},
            },
            "handlers": {
                "default": {
                    "level": config.normalized_level,
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "stream": f"ext://sys.{config.stream}",
                },
            },
            "loggers": {
                "": {
                    "handlers": ["default"],
                    "level": config.normalized_level,
                    "propagate": False,
                }
            },
        }
    )

    _configured = True
    return config


class StructuredLogger(logging.LoggerAdapter):
    """Logger adapter taking event fields as keyword arguments."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(logger, extra or {})

    def bind(self, **fields: Any) -> "StructuredLogger":
        return StructuredLogger(self.logger, {**self.extra, **fields})

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple[Any, Dict[str, Any]]:
        fields = dict(self.extra)
        for key in [k for k in kwargs if k not in _RESERVED_KEYS]:
            fields[key] = kwargs.pop(key)

        extra = kwargs.setdefault("extra", {})
        extra["context_data"] = fields
        return msg, kwargs

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:  # type: ignore[override]
        if not self.logger.isEnabledFor(level):
            return
        msg, kwargs = self.process(msg, kwargs)
        self.logger.log(level, msg, *args, **kwargs)


def get_logger(name: Optional[str] = None) -> StructuredLogger:
    return StructuredLogger(logging.getLogger(name))


@contextmanager
def run_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """Attach fields to every record logged inside the block, nesting over outer runs."""

    context = {**_RUN_CONTEXT.get(), **fields}
    token = _RUN_CONTEXT.set(context)
    try:
        yield context
    finally:
        _RUN_CONTEXT.reset(token)


def current_run_context() -> Dict[str, Any]:
    return dict(_RUN_CONTEXT.get())


__all__ = [
    "LoggingConfig",
    "JSONFormatter",
    "StructuredLogger",
    "setup_logging",
    "get_logger",
    "run_context",
    "current_run_context",
]
