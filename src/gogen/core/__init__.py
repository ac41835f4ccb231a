"""Core module exports."""

from gogen.core.errors import (
    ConfigError,
    ErrorCode,
    GoGenError,
    InputError,
    InternalError,
    ParseError,
    ResolveError,
)
from gogen.core.logging import (
    analysis_context,
    clear_analysis_id,
    configure_logging,
    get_analysis_id,
    get_logger,
    set_analysis_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "GoGenError",
    "InputError",
    "InternalError",
    "ParseError",
    "ResolveError",
    # Logging
    "analysis_context",
    "clear_analysis_id",
    "configure_logging",
    "get_analysis_id",
    "get_logger",
    "set_analysis_id",
]
