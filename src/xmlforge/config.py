"""Loader configuration with pydantic-settings + TOML."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict, TomlConfigSettingsSource


def _default_config_dir() -> Path:
    configured = os.environ.get("XMLFORGE_CONFIG_DIR")
    return Path(configured) if configured else Path.home() / ".xmlforge"


class HttpSettings(BaseSettings):
    """Remote document and resource fetching."""

    timeout: float = Field(default=10.0, gt=0)
    follow_redirects: bool = True


class ForgeSettings(BaseSettings):
    """Root configuration for document loading and compilation."""

    model_config = SettingsConfigDict(
        env_prefix="XMLFORGE_",
        env_nested_delimiter="__",
    )

    # Holds config.toml; set through XMLFORGE_CONFIG_DIR.
    config_dir: Path = Field(default_factory=_default_config_dir)
    # Used to resolve relative urls in documents that carry no base url.
    base_url: str | None = None
    http: HttpSettings = Field(default_factory=HttpSettings)
    # Scene name -> document url, consulted by ``goto-scene`` actions.
    scenes: dict[str, str] = Field(default_factory=dict)

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.toml"

    @classmethod
    def settings_customise_sources(cls, settings_cls, **kwargs):  # type: ignore[override]
        toml_path = _default_config_dir() / "config.toml"
        sources = (
            kwargs.get("init_settings"),
            kwargs.get("env_settings"),
        )
        if toml_path.exists():
            sources = (*sources, TomlConfigSettingsSource(settings_cls, toml_file=toml_path))
        return (*sources, kwargs.get("dotenv_settings"), kwargs.get("file_secret_settings"))


def load_config() -> ForgeSettings:
    """Load settings from init args, environment and ``<config_dir>/config.toml``."""
    return ForgeSettings()
