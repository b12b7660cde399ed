"""Structured logging for the patient records service.

structlog produces the event dictionaries, the standard library carries them
and loguru writes them out. Request identifiers bound with
:func:`request_context` are attached to every entry emitted while the request
is being handled.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from types import FrameType
from typing import Any, Iterator, Mapping

import structlog
from loguru import logger as loguru_logger

__all__ = [
    "configure_logging",
    "generate_request_id",
    "get_logger",
    "get_request_id",
    "request_context",
]

_REQUEST_ID: ContextVar[str | None] = ContextVar("request_id", default=None)
_CONFIGURED = False
_SERVICE_NAME: str | None = None


def _format_record(record: Mapping[str, Any]) -> str:
    extra = record.get("extra") or {}
    service = extra.get("service", "-")
    request_id = extra.get("request_id") or "-"
    message = str(record.get("message", ""))
    # loguru runs the returned value through str.format; JSON braces must survive.
    message = message.replace("{", "{{").replace("}", "}}")
    return (
        f"{record['time'].isoformat()} | {record['level'].name:<8} | "
        f"{service} | {request_id} | {message}\n"
    )


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def get_request_id() -> str | None:
    """Return the request identifier bound to the current context, if any."""

    return _REQUEST_ID.get()


def generate_request_id() -> str:
    """Return a new opaque request identifier."""

    return uuid.uuid4().hex


class LoguruInterceptHandler(logging.Handler):
    """Forward standard library records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - thin wrapper
        level: str | int
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        bound = loguru_logger.bind(logger=record.name)
        request_id = get_request_id()
        if request_id:
            bound = bound.bind(request_id=request_id)
        bound.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(*, service_name: str | None = None, level: str | int = "INFO") -> None:
    """Wire structlog, the standard library and loguru together.

    Safe to call more than once; only the first call installs sinks. Later
    calls may still update the ``service_name`` attached to every entry.
    """

    global _CONFIGURED, _SERVICE_NAME

    numeric_level = _resolve_level(level)

    if not _CONFIGURED:
        loguru_logger.remove()
        loguru_logger.add(
            sys.stdout,
            level=logging.getLevelName(numeric_level),
            enqueue=True,
            backtrace=False,
            diagnose=False,
            format=_format_record,
        )
        logging.basicConfig(
            handlers=[LoguruInterceptHandler()], level=numeric_level, force=True
        )
        logging.captureWarnings(True)

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _CONFIGURED = True

    if service_name:
        _SERVICE_NAME = service_name
        loguru_logger.configure(extra={"service": service_name})
        structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog bound logger."""

    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)


@contextmanager
def request_context(request_id: str | None = None) -> Iterator[str]:
    """Bind ``request_id`` to structlog and loguru for the lifetime of the block."""

    rid = request_id or generate_request_id()
    token = _REQUEST_ID.set(rid)
    bindings: dict[str, Any] = {"request_id": rid, "correlation_id": rid}
    if _SERVICE_NAME:
        bindings["service"] = _SERVICE_NAME

    previous = structlog.contextvars.get_contextvars()
    structlog.contextvars.bind_contextvars(**bindings)
    try:
        with loguru_logger.contextualize(request_id=rid, correlation_id=rid):
            yield rid
    finally:
        structlog.contextvars.unbind_contextvars(*bindings)
        restore = {key: previous[key] for key in bindings if key in previous}
        if restore:
            structlog.contextvars.bind_contextvars(**restore)
        _REQUEST_ID.reset(token)
