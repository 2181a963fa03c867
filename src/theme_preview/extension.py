"""
Extension package reader.

An unpacked extension directory holds an ``extension.vsixmanifest`` (XML)
with the display metadata and the location of the package descriptor
(``package.json``, JSON with comments), whose ``contributes.themes`` lists
the themes the extension ships.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from pydantic import BaseModel, ValidationError

from .errors import InvalidFormatError, NotFoundError
from .jsonc import read_jsonc
from .models import ExtensionInfo, ThemeContribution

logger = logging.getLogger(__name__)

MANIFEST_NAME = "extension.vsixmanifest"
GITHUB_PROPERTY_ID = "Microsoft.VisualStudio.Services.Links.GitHub"
PACKAGE_ASSET_TYPE = "Microsoft.VisualStudio.Code.Manifest"

_EMOJI = re.compile(
    "["
    "\U0001F000-\U0001FAFF"  # pictographs, emoticons, transport, symbols
    "\U00002600-\U000027BF"  # misc symbols, dingbats
    "\U00002B00-\U00002BFF"  # arrows, stars
    "\U0001F1E6-\U0001F1FF"  # regional indicators
    "\U0000FE0E-\U0000FE0F"  # variation selectors
    "\U0000200D"             # zero width joiner
    "\U000020E3"             # combining keycap
    "\U000E0020-\U000E007F"  # tag characters
    "]+"
)


def strip_emoji(text: str) -> str:
    return _EMOJI.sub("", text)


class InfoResult(BaseModel):
    """What ``info`` reports about an extension."""
    extension: ExtensionInfo
    theme_contributes: list[ThemeContribution]

    def to_wire(self) -> dict[str, Any]:
        return {
            "extension": self.extension.model_dump(by_alias=True, exclude_none=True),
            "themeContributes": [
                contribution.model_dump(by_alias=True) for contribution in self.theme_contributes
            ],
        }


# ---------------------------------------------------------------------------
# Manifest (XML)
# ---------------------------------------------------------------------------

def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in element:
        if isinstance(child.tag, str) and _local_name(child.tag) == name:
            yield child


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    return next(_children(element, name), None)


def _text(element: Optional[ET.Element]) -> str:
    if element is None:
        return ""
    return " ".join("".join(element.itertext()).split())


def read_manifest(path: Union[str, Path]) -> ET.Element:
    """Parse the manifest and return its root element.

    Raises:
        NotFoundError: If the manifest does not exist.
        InvalidFormatError: If the manifest is not well-formed XML.
    """
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"Could not find extension manifest at '{path}'")
    try:
        return ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise InvalidFormatError(f"Invalid xml at '{path}': {exc}") from exc


def _metadata(manifest: ET.Element) -> ET.Element:
    metadata = _child(manifest, "Metadata")
    if metadata is None:
        raise InvalidFormatError("Could not parse metadata from extension manifest")
    return metadata


def parse_display_name(manifest: ET.Element) -> str:
    name = strip_emoji(_text(_child(_metadata(manifest), "DisplayName"))).strip()
    if not name:
        raise InvalidFormatError("Missing extension name in manifest")
    return name


def parse_description(manifest: ET.Element) -> str:
    description = strip_emoji(_text(_child(_metadata(manifest), "Description"))).strip()
    if not description:
        raise InvalidFormatError("Missing extension description in manifest")
    return description


def parse_github_link(manifest: ET.Element) -> Optional[str]:
    properties = _child(_metadata(manifest), "Properties")
    if properties is None:
        return None
    link = None
    for prop in _children(properties, "Property"):
        if prop.get("Id") == GITHUB_PROPERTY_ID:
            link = prop.get("Value")
    return link


def parse_package_json_path(manifest: ET.Element) -> str:
    assets = _child(manifest, "Assets")
    package_path = None
    if assets is not None:
        for asset in _children(assets, "Asset"):
            if asset.get("Type") == PACKAGE_ASSET_TYPE:
                package_path = asset.get("Path")
    if not package_path:
        raise InvalidFormatError("Could not find package.json path in extension manifest")
    return package_path


# ---------------------------------------------------------------------------
# Package descriptor (JSON)
# ---------------------------------------------------------------------------

def parse_theme_contributes(package_json: Any) -> list[ThemeContribution]:
    """Theme contributions with a label, uiTheme and path, de-duplicated by path.

    A later entry for the same path replaces the earlier one but keeps its
    position.
    """
    by_path: dict[str, ThemeContribution] = {}
    if not isinstance(package_json, dict):
        return []
    contributes = package_json.get("contributes")
    if not isinstance(contributes, dict) or not isinstance(contributes.get("themes"), list):
        return []

    for entry in contributes["themes"]:
        if not isinstance(entry, dict):
            continue
        if not (entry.get("label") and entry.get("uiTheme") and entry.get("path")):
            continue
        try:
            contribution = ThemeContribution.model_validate(entry)
        except ValidationError:
            logger.warning("Skipping malformed theme contribution %r", entry)
            continue
        by_path[contribution.path] = contribution
    return list(by_path.values())


def get_info(extension_dir: Union[str, Path]) -> InfoResult:
    """Read an extension directory's metadata and theme contributions.

    Raises:
        NotFoundError: If the manifest or package descriptor is missing.
        InvalidFormatError: If either file is malformed or incomplete.
    """
    extension_dir = Path(extension_dir)
    manifest = read_manifest(extension_dir / MANIFEST_NAME)

    extension = ExtensionInfo(
        display_name=parse_display_name(manifest),
        description=parse_description(manifest),
        github_link=parse_github_link(manifest),
    )

    package_json_path = extension_dir / parse_package_json_path(manifest)
    package_json = read_jsonc(package_json_path)
    contributions = parse_theme_contributes(package_json)
    logger.info("Found %d theme contribution(s) in %s", len(contributions), package_json_path)

    return InfoResult(extension=extension, theme_contributes=contributions)
