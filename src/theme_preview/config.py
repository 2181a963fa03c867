"""Render configuration: defaults, optional YAML file, environment, CLI flags."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import InvalidFormatError, NotFoundError
from .languages import Language, select_languages
from .renderer import (
    DEFAULT_MONO_FONT_FAMILY,
    DEFAULT_PNG_WIDTH,
    DEFAULT_SANS_SERIF_FONT_FAMILY,
    PreviewRenderer,
    SvgOptions,
)

logger = logging.getLogger(__name__)

CONFIG_ENV = "THEME_PREVIEW_CONFIG"
PNG_WIDTH_ENV = "THEME_PREVIEW_PNG_WIDTH"
LOG_LEVEL_ENV = "THEME_PREVIEW_LOG_LEVEL"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RenderConfig(BaseModel):
    """Settings for one ``theme-preview`` run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rounded: bool = True
    mono_font_family: str = DEFAULT_MONO_FONT_FAMILY
    sans_serif_font_family: str = DEFAULT_SANS_SERIF_FONT_FAMILY
    png_width: int = DEFAULT_PNG_WIDTH
    languages: Optional[list[str]] = None  # ext names; None means all
    log_level: str = "WARNING"

    @field_validator("png_width")
    @classmethod
    def _positive_width(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("png_width must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("languages")
    @classmethod
    def _known_languages(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is not None:
            select_languages(value)
        return value

    def svg_options(self) -> SvgOptions:
        return SvgOptions(
            rounded=self.rounded,
            mono_font_family=self.mono_font_family,
            sans_serif_font_family=self.sans_serif_font_family,
        )

    def renderer(self) -> PreviewRenderer:
        return PreviewRenderer(self.svg_options(), png_width=self.png_width)

    def selected_languages(self) -> tuple[Language, ...]:
        return select_languages(self.languages)


def read_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Read a YAML config file.  An empty file is an empty mapping.

    Raises:
        NotFoundError: If the file does not exist.
        InvalidFormatError: If the file is not a YAML mapping.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise NotFoundError(f"Config file not found at '{path}'") from exc
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise InvalidFormatError(f"Invalid config at '{path}': {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidFormatError(f"Invalid config at '{path}': expected a mapping")
    return data


def _env_values(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    if environ.get(PNG_WIDTH_ENV):
        values["png_width"] = environ[PNG_WIDTH_ENV]
    if environ.get(LOG_LEVEL_ENV):
        values["log_level"] = environ[LOG_LEVEL_ENV]
    return values


def load_config(
    path: Union[str, Path, None] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RenderConfig:
    """Build the effective configuration.

    Precedence, lowest first: defaults, the YAML file (``path`` or
    ``$THEME_PREVIEW_CONFIG``), environment variables, ``overrides``.  ``None``
    values in ``overrides`` are ignored so unset CLI flags fall through.

    Raises:
        NotFoundError: If the config file does not exist.
        InvalidFormatError: If a value or key is invalid.
    """
    environ = os.environ if environ is None else environ
    path = path or environ.get(CONFIG_ENV)

    values: dict[str, Any] = {}
    if path:
        logger.debug("Loading config from %s", path)
        values.update(read_config_file(path))
    values.update(_env_values(environ))
    values.update({key: value for key, value in (overrides or {}).items() if value is not None})

    try:
        return RenderConfig.model_validate(values)
    except ValidationError as exc:
        raise InvalidFormatError(f"Invalid configuration: {exc}") from exc
