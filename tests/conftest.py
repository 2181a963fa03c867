"""Shared fixtures: a scripted grammar engine and on-disk extension builders."""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path

import pytest

from theme_preview.metadata import FontStyle, encode_metadata
from theme_preview.tokenizer import TokenizeLineResult

FAKE_COLOR_MAP = [None, "#111111", "#222222", "#333333"]

MANIFEST_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<PackageManifest Version="2.0.0" xmlns="http://schemas.microsoft.com/developer/vsx-schema/2011">
  <Metadata>
    <Identity Language="en-US" Id="sample-theme" Version="1.0.0" Publisher="someone" />
    <DisplayName>{display_name}</DisplayName>
    <Description xml:space="preserve">{description}</Description>
    <Properties>
      <Property Id="Microsoft.VisualStudio.Code.Engine" Value="^1.60.0" />
      <Property Id="Microsoft.VisualStudio.Services.Links.GitHub" Value="https://github.com/someone/sample-theme" />
    </Properties>
  </Metadata>
  <Assets>
    <Asset Type="Microsoft.VisualStudio.Code.Manifest" Path="extension/package.json" Addressable="true" />
  </Assets>
</PackageManifest>
"""


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class FakeGrammar:
    """Every line: first word in palette 1, the rest (if any) bold in palette 3."""

    def __init__(self, scope_name: str):
        self.scope_name = scope_name
        self.calls: list[tuple[str, tuple]] = []

    def tokenize_line(self, line, prior_state=None):
        state = prior_state or ()
        self.calls.append((line, state))
        tokens = [0, encode_metadata(foreground=1)]
        space = line.find(" ")
        if space > 0:
            tokens += [space, encode_metadata(foreground=3, font_style=FontStyle.BOLD)]
        return TokenizeLineResult(tokens, state + (line,))


class FakeSession:
    def __init__(self, registry):
        self._registry = registry
        self.color_map = list(FAKE_COLOR_MAP)

    def grammar(self, scope_name):
        grammar = FakeGrammar(scope_name)
        self._registry.grammars.append(grammar)
        return grammar


class FakeRegistry:
    """Stands in for ``tokenizer.Registry``; records the rules it is given."""

    def __init__(self):
        self.rules: list[list[dict]] = []
        self.grammars: list[FakeGrammar] = []

    @contextmanager
    def themed(self, rules):
        self.rules.append(list(rules))
        yield FakeSession(self)


@pytest.fixture
def fake_registry():
    return FakeRegistry()


@pytest.fixture
def make_extension(tmp_path):
    """Build an unpacked extension directory.

    ``themes`` maps a path relative to ``extension/`` to the JSON document to
    write there; ``contributes`` is the ``contributes.themes`` list.
    """

    def _make(themes=None, contributes=None, display_name="Sample Theme",
              description="A sample theme"):
        root = tmp_path / "ext"
        (root / "extension").mkdir(parents=True, exist_ok=True)
        (root / "extension.vsixmanifest").write_text(
            MANIFEST_TEMPLATE.format(display_name=display_name, description=description),
            encoding="utf-8",
        )
        write_json(root / "extension" / "package.json", {
            "name": "sample-theme",
            "contributes": {"themes": contributes or []},
        })
        for rel_path, document in (themes or {}).items():
            write_json(root / "extension" / rel_path, document)
        return root

    return _make
