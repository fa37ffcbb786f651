"""Logging configuration for Snapgram."""

import json
import logging
import logging.handlers
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from time import perf_counter
from typing import Any

from .settings import settings

# Set by the request middleware, read by every ContextLogger.
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    # LogRecord attributes that are not user-supplied extras
    _reserved = set(
        logging.LogRecord("", 0, "", 0, "", (), None).__dict__
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in self._reserved and key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(level: str | None = None, log_dir: str | None = None) -> None:
    """Configure application logging.

    Args:
        level: Root log level name. Defaults to DEBUG in debug mode, INFO
            otherwise.
        log_dir: Directory for the rotating log file. Defaults to the
            API_LOG_DIR setting.
    """
    if level is None:
        level = "DEBUG" if settings.debug else "INFO"

    logs_dir = Path(log_dir or settings.api.log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    log_file = logs_dir / f"snapgram-{datetime.now():%Y-%m-%d}.log"
    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"  # 10MB
    )
    file_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    if settings.debug:
        console_handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s [%(name)s:%(lineno)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    else:
        console_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(console_handler)


class ContextLogger:
    """Logger that attaches the request correlation id and static context."""

    def __init__(self, name: str) -> None:
        self.logger = logging.getLogger(name)
        self.context: dict[str, Any] = {}

    @property
    def correlation_id(self) -> str | None:
        return correlation_id_var.get()

    def add_context(self, **kwargs: Any) -> "ContextLogger":
        self.context.update(kwargs)
        return self

    @asynccontextmanager
    async def track_time(self, operation: str) -> AsyncGenerator[None, None]:
        start = perf_counter()
        try:
            yield
        finally:
            duration_ms = (perf_counter() - start) * 1000
            self.info(
                f"{operation} completed", extra={"duration_ms": round(duration_ms, 2)}
            )

    def _log(
        self,
        level: int,
        msg: str,
        *args: Any,
        exc_info: bool = False,
        **kwargs: Any,
    ) -> None:
        extra = dict(kwargs.pop("extra", {}))
        if self.correlation_id:
            extra.setdefault("correlation_id", self.correlation_id)
        if self.context:
            extra.update(self.context)
        self.logger.log(level, msg, *args, exc_info=exc_info, extra=extra, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        kwargs["exc_info"] = True
        self._log(logging.ERROR, msg, *args, **kwargs)
