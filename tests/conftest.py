"""Shared fixtures for xmlforge tests."""

import textwrap
from pathlib import Path

import pytest
from lxml import etree
from PIL import Image

from xmlforge.config import ForgeSettings
from xmlforge.engine import PlaneGeometry
from xmlforge.loader import DocumentLoader


@pytest.fixture
def asset_dir(tmp_path: Path) -> Path:
    Image.new("RGBA", (256, 256)).save(tmp_path / "sheet.png")
    Image.new("RGBA", (64, 32)).save(tmp_path / "small.png")
    (tmp_path / "jump.ogg").write_bytes(b"OggS\x00fake-audio")
    return tmp_path


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ForgeSettings:
    monkeypatch.setenv("XMLFORGE_CONFIG_DIR", str(tmp_path / "config"))
    return ForgeSettings()


@pytest.fixture
def loader(settings: ForgeSettings) -> DocumentLoader:
    return DocumentLoader(settings)


@pytest.fixture
def write_document(asset_dir: Path):
    """Write XML next to the assets and return its root, parsed with a base url."""

    def _write(xml: str, name: str = "document.xml") -> etree._Element:
        path = asset_dir / name
        path.write_text(textwrap.dedent(xml).strip())
        return etree.parse(str(path)).getroot()

    return _write


def node(xml: str) -> etree._Element:
    """Parse an XML fragment without a base url."""
    return etree.fromstring(textwrap.dedent(xml).strip())


class RenderedText:
    """Stand-in for a font rendering: 8x8 pixels per character."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.texture = Image.new("RGBA", (8 * max(len(text), 1), 8))

    def get_geometry(self) -> PlaneGeometry:
        return PlaneGeometry(8 * len(self.text), 8)

    def get_texture(self) -> Image.Image:
        return self.texture


ENTITIES_XML = """
<entities>
  <textures>
    <texture id="moot" url="sheet.png" w="256" h="256"/>
    <texture id="small" url="small.png"/>
  </textures>
  <animations texture="moot" w="48" h="48">
    <animation id="idle">
      <frame x="0" y="0" duration="0.5"/>
      <frame x="48" y="0" duration="0.5"/>
    </animation>
    <animation id="run" group="run">
      <frame x="0" y="48" duration="0.1"/>
    </animation>
  </animations>
  <entity id="Hero">
    <geometry type="plane" w="48" h="48"/>
    <collision>
      <rect w="12" h="24"/>
      <circ r="6" x="1" y="2"/>
    </collision>
    <audio>
      <clip id="jump" src="jump.ogg"/>
    </audio>
    <traits>
      <trait name="health" max="50"/>
      <trait name="jump" force="120"/>
    </traits>
    <events>
      <event name="land">
        <action type="emit-audio" id="jump"/>
      </event>
    </events>
    <sequences>
      <sequence id="intro">
        <step><action type="emit" event="land"/></step>
      </sequence>
    </sequences>
    <animation-router>lambda: "idle"</animation-router>
  </entity>
  <entity id="Sign">
    <geometry type="plane" w="32" h="32" w-segments="2"/>
  </entity>
</entities>
"""
