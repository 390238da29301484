"""
Error kinds and diagnostics raised or collected by the render pipeline.

Fatal errors are exceptions and propagate unchanged to the caller.
Non-fatal conditions are recorded as Diagnostic values and logged.
"""

from dataclasses import dataclass
from typing import Optional


class PagewrightError(Exception):
    """Base for all pagewright errors."""


class ConfigurationError(PagewrightError):
    """Raised when settings are invalid or cannot be read."""


class ConversionError(PagewrightError):
    """Raised by a converter that failed to transform content."""

    def __init__(self, message: str, converter: Optional[str] = None):
        super().__init__(message)
        self.converter = converter


class TemplateRenderError(PagewrightError):
    """Raised when a template fails to parse or execute."""

    def __init__(self, message: str, path: Optional[str] = None, lineno: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.lineno = lineno


class NoConverterAvailable(PagewrightError):
    """Raised when highlighter markers are requested but no converter matched."""

    def __init__(self, extname: str):
        super().__init__(f"No converter matches extension '{extname}'")
        self.extname = extname


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal condition noticed during a render."""

    message: str
    path: Optional[str] = None
    lineno: Optional[int] = None

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        location = self.path or ''
        if self.lineno is not None:
            location = f"{location} (line {self.lineno})"
        return f"{self.message} in {location}" if location else self.message


@dataclass(frozen=True)
class TemplateParseWarning(Diagnostic):
    """The template parsed, but something in it looks wrong."""


@dataclass(frozen=True)
class MissingLayoutWarning(Diagnostic):
    """A document named a layout that is not registered."""

    def __str__(self) -> str:
        return self.message
