"""Domain layer: errors and constants."""

from .errors import (
    ErrorCodes,
    HTTPError,
    RedirectRangeError,
    TemplateCompileError,
    TemplateError,
    TemplateExecuteError,
    WatchSetupError,
)

__all__ = [
    "ErrorCodes",
    "HTTPError",
    "RedirectRangeError",
    "TemplateError",
    "TemplateCompileError",
    "TemplateExecuteError",
    "WatchSetupError",
]
