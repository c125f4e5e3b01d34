"""Error codes and facility exceptions for exterror."""

from __future__ import annotations

from typing import Any

CONFIG_001 = "CONFIG_001"  # Unreadable or invalid config file
CONFIG_002 = "CONFIG_002"  # Config file not found
CONFIG_003 = "CONFIG_003"  # Default template file unreadable
TEMPLATE_001 = "TEMPLATE_001"  # Template syntax error
TEMPLATE_002 = "TEMPLATE_002"  # Template evaluation failed


class ExtErrorFailure(Exception):
    """Base exception for failures of the facility itself.

    Args:
        message: Human-readable error description.
        code: Error code constant from this module.
        context: Additional key/value context appended to ``str()``.
    """

    code: str = "EXTERROR-UNKNOWN"

    def __init__(self, message: str, *, code: str | None = None, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context = context

    def __str__(self) -> str:
        details = [f"{key}={value}" for key, value in self.context.items() if value is not None]
        if not details:
            return self.message
        return f"{self.message} ({', '.join(details)})"


class TemplateError(ExtErrorFailure):
    """Raised when a report template cannot be used."""


class TemplateCompileError(TemplateError):
    """Raised when template source does not parse."""

    code = TEMPLATE_001


class TemplateRenderError(TemplateError):
    """Raised when evaluating a report template fails.

    This is a programmer error: the facility never catches it and never falls
    back to a partial report.
    """

    code = TEMPLATE_002
