"""Root logger bootstrap.

All module loggers and uvicorn share one stdout handler.  Production
emits JSON lines (``logging.json_output``), local runs get uvicorn's
coloured format.  Records carry ``trace_id`` / ``span_id`` when a span
is active, empty strings otherwise.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from zivy.configs.system import LoggingConfig

_JSON_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
)
_JSON_RENAMES = {"asctime": "timestamp", "levelname": "level", "name": "logger"}

_DEV_FORMAT = "%(levelprefix)s %(asctime)s %(name)s  %(message)s"
_DEV_DATEFMT = "%H:%M:%S"

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "opentelemetry")


class _TraceContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        ctx = trace.get_current_span().get_span_context()
        valid = ctx is not None and ctx.is_valid
        record.trace_id = format(ctx.trace_id, "032x") if valid else ""  # type: ignore[attr-defined]
        record.span_id = format(ctx.span_id, "016x") if valid else ""  # type: ignore[attr-defined]
        return True


def _json_formatter(service_name: str) -> logging.Formatter:
    from pythonjsonlogger.json import JsonFormatter

    return JsonFormatter(
        fmt=_JSON_FORMAT,
        rename_fields=_JSON_RENAMES,
        defaults={"trace_id": "", "span_id": ""},
        static_fields={"service": service_name},
    )


def _dev_formatter() -> logging.Formatter:
    from uvicorn.logging import DefaultFormatter

    return DefaultFormatter(fmt=_DEV_FORMAT, datefmt=_DEV_DATEFMT, use_colors=True)


def setup_logging(
    config: LoggingConfig | None = None, service_name: str = "zivy"
) -> None:
    """Configure the root logger.  Call once, before the app is built.

    JSON lines carry a static ``service`` field set to *service_name*.
    """
    config = config or LoggingConfig()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_TraceContextFilter())
    handler.setFormatter(
        _json_formatter(service_name) if config.json_output else _dev_formatter()
    )

    root = logging.getLogger()
    root.setLevel(config.level.upper())
    root.handlers = [handler]

    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
