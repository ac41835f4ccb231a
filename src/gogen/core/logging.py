"""Structured logging for package analysis.

Every FileSet construction is one analysis. It gets a short correlation id
that is attached to each event logged while it runs, so the discovery,
parse and check events of one package can be told apart from another's.

Events go through structlog into stdlib handlers, one per configured
output, each with its own level and renderer (console or JSON).
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from gogen.config.models import LoggingConfig, LogOutputConfig

_analysis_id: ContextVar[str | None] = ContextVar("analysis_id", default=None)

# First file output of the active configuration
_log_file_path: Path | None = None

_CONSOLE_STREAMS = ("stderr", "stdout")


# =============================================================================
# Analysis correlation
# =============================================================================


def get_analysis_id() -> str | None:
    return _analysis_id.get()


def set_analysis_id(analysis_id: str | None = None) -> str:
    """Start a new analysis, generating an id unless one is given."""
    aid = analysis_id or uuid4().hex[:12]
    _analysis_id.set(aid)
    return aid


def clear_analysis_id() -> None:
    _analysis_id.set(None)


@contextmanager
def analysis_context(**fields: Any) -> Iterator[None]:
    """Attach ``fields`` to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield


def _add_analysis_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if aid := get_analysis_id():
        event_dict["analysis_id"] = aid
    return event_dict


def get_log_file_path() -> Path | None:
    """File that events are written to, if any output is a file."""
    return _log_file_path


# =============================================================================
# Configuration
# =============================================================================


def _level(name: str | None, default: int) -> int:
    if not name:
        return default
    name = name.upper()
    if name == "WARN":
        name = "WARNING"
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Route gogen events to the configured outputs.

    Without ``config`` a single stderr output is set up from ``json_format``
    and ``level``. Calling again replaces the previous setup.
    """
    from gogen.config.models import LoggingConfig, LogOutputConfig

    global _log_file_path

    if config is None:
        config = LoggingConfig(
            level=level,
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )
    base_level = _level(config.level, logging.INFO)

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_analysis_id,  # type: ignore[list-item]
    ]
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(base_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration must reach loggers created at import time
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.setLevel(base_level)

    _log_file_path = None
    for output in config.outputs:
        handler = _handler(output, pre_chain)
        handler.setLevel(_level(output.level, base_level))
        root.addHandler(handler)
        if output.destination not in _CONSOLE_STREAMS and _log_file_path is None:
            _log_file_path = Path(output.destination)


def _handler(
    output: LogOutputConfig, pre_chain: list[structlog.types.Processor]
) -> logging.Handler:
    """Handler and formatter for one output: stderr, stdout or a file path."""
    stream = getattr(sys, output.destination) if output.destination in _CONSOLE_STREAMS else None
    handler: logging.Handler
    if stream is not None:
        handler = logging.StreamHandler(stream)
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a")

    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=stream is not None and stream.isatty(),
            pad_event_to=0,
            pad_level=False,
        )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)
    )
    return handler


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger for one gogen component, e.g. ``get_logger("fileset")``."""
    # The name goes to the logger factory so the proxy stays lazy; bind()
    # would freeze the configuration current at import time
    if name:
        return structlog.get_logger(name)  # type: ignore[no-any-return]
    return structlog.get_logger()  # type: ignore[no-any-return]
