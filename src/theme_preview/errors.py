"""
Error taxonomy for theme-preview.

Every failure raised by the pipeline derives from ``ThemePreviewError`` so the
CLI can tell pipeline failures apart from programming errors.  The concrete
classes mirror the kinds of things that go wrong with static extension files:

    NotFoundError              : manifest, package or theme file missing
    InvalidFormatError         : malformed XML / JSON / tmTheme, or a document
                                 missing required structural fields
    IncludeDepthExceededError  : a theme include chain longer than the bound
    MissingRequiredValueError  : a theme name or canonical color that cannot
                                 be resolved even through defaults
    UnsupportedThemeTypeError  : theme type not one of the four families
    TokenizerUnavailableError  : no grammar for an example language

``ThemeProcessingError`` wraps any of the above with the contribution path of
the theme being processed so a batch run can attribute each failure.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class ThemePreviewError(Exception):
    """Base class for all pipeline failures."""


class NotFoundError(ThemePreviewError, FileNotFoundError):
    """A required file does not exist."""


class InvalidFormatError(ThemePreviewError, ValueError):
    """A file could not be parsed or is missing required structure."""


class IncludeDepthExceededError(InvalidFormatError):
    """The ``include`` chain of a theme goes deeper than allowed."""

    def __init__(self, path: Union[str, Path], max_depth: int):
        self.path = str(path)
        self.max_depth = max_depth
        super().__init__(
            f"Theme include chain starting at '{path}' exceeds {max_depth} includes"
        )


class MissingRequiredValueError(ThemePreviewError, ValueError):
    """A required value could not be resolved."""


class MissingThemeNameError(MissingRequiredValueError):
    """Neither the contribution label nor the theme declares a name."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = str(path) if path is not None else None
        super().__init__("Theme must have a 'name' defined")


class MissingRequiredColorError(MissingRequiredValueError):
    """A required canonical color has no value and no default."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Missing color value for '{key}'")


class UnsupportedThemeTypeError(ThemePreviewError, ValueError):
    """The theme type cannot be mapped to dark, light, hcDark or hcLight."""

    def __init__(self, source_type: Optional[str], ui_theme: Optional[str]):
        self.source_type = source_type
        self.ui_theme = ui_theme
        super().__init__(
            "Theme 'type' must be one of 'dark', 'light', 'hc-dark' or 'hc-light' "
            f"(got type={source_type!r}, uiTheme={ui_theme!r})"
        )


class TokenizerUnavailableError(ThemePreviewError):
    """No grammar could be loaded for a scope."""

    def __init__(self, scope_name: str):
        self.scope_name = scope_name
        super().__init__(f"Grammar not found for scope '{scope_name}'")


class ThemeProcessingError(ThemePreviewError):
    """A theme contribution failed; wraps the lower-level cause."""

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to process theme '{path}': {cause}")


def unwrap_error(error: BaseException) -> str:
    """Return the message of an exception, falling back to its repr."""
    message = str(error)
    return message if message else repr(error)
