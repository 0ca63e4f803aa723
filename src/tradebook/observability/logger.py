"""Structured logging for journal operations.

structlog renders every entry as JSON or console text.  A trace id is
carried in a context var so every line emitted while saving one outcome,
building one summary or running one CLI command can be correlated.

Usage::

    setup_logging(settings.observability.log_level, settings.observability.log_format)
    log = get_logger(__name__)
    with operation_context("save_outcome", trade_id=trade.id):
        log.info("outcome_saved", legs=3)
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

import structlog

_trace_id: ContextVar[str] = ContextVar("trace_id", default="")


def get_trace_id() -> str:
    """Current trace id, minting one on first use."""
    tid = _trace_id.get()
    if not tid:
        tid = new_trace_id()
    return tid


def new_trace_id() -> str:
    tid = uuid.uuid4().hex
    _trace_id.set(tid)
    return tid


def _add_trace_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: stamp the active trace id."""
    event_dict.setdefault("trace_id", get_trace_id())
    return event_dict


def _add_component(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add the component (sub-package) name."""
    name = event_dict.get("logger") or ""
    parts = name.split(".")
    component = parts[1] if len(parts) > 1 and parts[0] == "tradebook" else name
    event_dict.setdefault("component", component or "tradebook")
    return event_dict


def setup_logging(level: str = "INFO", format: str = "console") -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        format: "json" for machine consumption, "console" for humans.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        _add_trace_id,
        structlog.stdlib.add_logger_name,
        _add_component,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    logging.getLogger("tradebook").setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def operation_context(operation: str, **bindings: Any) -> Iterator[str]:
    """Run a block under a fresh trace id with ``bindings`` on every entry.

    Yields the trace id.  The previous trace id and bound values are
    restored on exit.
    """
    token = _trace_id.set(uuid.uuid4().hex)
    bound = structlog.contextvars.bind_contextvars(operation=operation, **bindings)
    try:
        yield _trace_id.get()
    finally:
        structlog.contextvars.reset_contextvars(**bound)
        _trace_id.reset(token)
