"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .errors import (
    UITreeError,
    ValidationError,
    LoadError,
    CompileError,
    RemoteInvocationError,
)
from .logging_config import configure_logging, get_logger, LogContext
from .json import JSONParseError, decode_json, decode_json_object, safe_json_dumps


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "UITreeError",
    "ValidationError",
    "LoadError",
    "CompileError",
    "RemoteInvocationError",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "JSONParseError",
    "decode_json",
    "decode_json_object",
    "safe_json_dumps",
]
