"""Config module exports."""

from gogen.config.loader import GoGenSettings, load_config
from gogen.config.models import (
    BuildConfig,
    CheckConfig,
    GoGenConfig,
    LoggingConfig,
    LogOutputConfig,
)

__all__ = [
    "load_config",
    "BuildConfig",
    "CheckConfig",
    "GoGenConfig",
    "GoGenSettings",
    "LoggingConfig",
    "LogOutputConfig",
]
