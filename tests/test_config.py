"""Tests for configuration system."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from xmlforge.config import ForgeSettings, HttpSettings, load_config


def test_http_settings_defaults():
    http = HttpSettings()
    assert http.timeout == 10.0
    assert http.follow_redirects is True


@pytest.mark.parametrize("bad", [0, -1, -0.5])
def test_http_timeout_rejected(bad: float) -> None:
    with pytest.raises(ValidationError):
        HttpSettings(timeout=bad)


def test_forge_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("XMLFORGE_CONFIG_DIR", raising=False)
    settings = ForgeSettings()
    assert settings.config_dir.name == ".xmlforge"
    assert settings.base_url is None
    assert settings.scenes == {}


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XMLFORGE_BASE_URL", "https://cdn.example.com/levels/")
    monkeypatch.setenv("XMLFORGE_HTTP__TIMEOUT", "2.5")
    settings = load_config()
    assert settings.base_url == "https://cdn.example.com/levels/"
    assert settings.http.timeout == 2.5


def test_scene_map_from_init():
    settings = ForgeSettings(scenes={"level-2": "levels/two.xml"})
    assert settings.scenes["level-2"] == "levels/two.xml"


def test_toml_read_from_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "config.toml").write_text(
        'base_url = "https://cdn.example.com/"\n'
        "\n"
        "[http]\n"
        "timeout = 4.0\n"
        "\n"
        "[scenes]\n"
        '"level-2" = "levels/two.xml"\n'
    )
    monkeypatch.setenv("XMLFORGE_CONFIG_DIR", str(tmp_path))
    settings = load_config()
    assert settings.config_dir == tmp_path
    assert settings.config_file == tmp_path / "config.toml"
    assert settings.base_url == "https://cdn.example.com/"
    assert settings.http.timeout == 4.0
    assert settings.scenes == {"level-2": "levels/two.xml"}


def test_missing_toml_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XMLFORGE_CONFIG_DIR", str(tmp_path / "empty"))
    settings = load_config()
    assert settings.config_dir == tmp_path / "empty"
    assert settings.base_url is None
