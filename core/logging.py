from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
from structlog.types import Processor


def _build_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]


def _foreign_pre_chain() -> list[Processor]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _install(handler: logging.Handler, level: str) -> structlog.stdlib.BoundLogger:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level.upper())
    root_logger.addHandler(handler)

    structlog.configure(
        processors=_build_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.stdlib.get_logger()


def setup_json_logging(log_dir: str, level: str = "INFO") -> structlog.stdlib.BoundLogger:
    """Configure structlog to emit NDJSON lines into ``log_dir/app.ndjson``."""

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    file_path = log_path / "app.ndjson"

    handler = logging.FileHandler(file_path, encoding="utf-8")
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )
    return _install(handler, level)


def setup_console_logging(level: str = "WARNING") -> structlog.stdlib.BoundLogger:
    """Configure structlog to render human-readable lines on stderr."""

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False),
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )
    return _install(handler, level)
