"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (DEPREVIEW__REGISTRY__TIMEOUT_SECONDS=5)
  2. depreview.yaml         (searched in cwd, then the user config dir)
  3. Hardcoded defaults

The config file is optional — all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("depreview")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "depreview.db")


def _find_config_file() -> str | None:
    """Return the path of the first depreview.yaml found, or None."""
    candidates = [
        Path("depreview.yaml"),
        Path(platformdirs.user_config_dir("depreview")) / "depreview.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class RegistrySettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str = "https://registry.npmjs.org"
    package_page_url: str = "https://www.npmjs.com/package/{name}"
    timeout_seconds: float = 30.0
    # None means every dependency is fetched at once.
    max_concurrency: int | None = Field(default=None, ge=1)


class StoreSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    db_path: str = _DEFAULT_DB_PATH


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: DEPREVIEW__STORE__DB_PATH=/tmp/x.db
        env_prefix="DEPREVIEW__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
        extra="forbid",
    )

    data_dir: str = _DEFAULT_DATA_DIR
    registry: RegistrySettings = RegistrySettings()
    store: StoreSettings = StoreSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
