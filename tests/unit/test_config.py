"""Unit tests for platform-aware configuration defaults."""

from __future__ import annotations

import platformdirs
import pytest
from pydantic import ValidationError

from depreview.config import (
    _DEFAULT_DATA_DIR,
    _DEFAULT_DB_PATH,
    RegistrySettings,
    Settings,
    StoreSettings,
)


class TestPlatformDefaults:
    """Verify config defaults use platformdirs instead of hardcoded Unix paths."""

    def test_default_data_dir_matches_platformdirs(self) -> None:
        expected = platformdirs.user_data_dir("depreview")
        assert expected == _DEFAULT_DATA_DIR

    def test_default_db_path_under_data_dir(self) -> None:
        assert _DEFAULT_DB_PATH.startswith(_DEFAULT_DATA_DIR)
        assert _DEFAULT_DB_PATH.endswith("depreview.db")

    def test_store_settings_uses_platform_default(self) -> None:
        assert StoreSettings().db_path == _DEFAULT_DB_PATH


class TestRegistryDefaults:
    def test_npm_endpoints(self) -> None:
        settings = RegistrySettings()
        assert settings.url == "https://registry.npmjs.org"
        assert settings.package_page_url == "https://www.npmjs.com/package/{name}"

    def test_concurrency_uncapped_by_default(self) -> None:
        assert RegistrySettings().max_concurrency is None

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEPREVIEW__REGISTRY__MAX_CONCURRENCY", "4")
        monkeypatch.setenv("DEPREVIEW__STORE__DB_PATH", "/tmp/depreview-test.db")
        settings = Settings()
        assert settings.registry.max_concurrency == 4
        assert settings.store.db_path == "/tmp/depreview-test.db"


class TestConfigValidation:
    def test_wrong_type_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            Settings(registry={"timeout_seconds": "not-a-number"})  # type: ignore[arg-type]

    def test_zero_concurrency_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegistrySettings(max_concurrency=0)

    def test_unknown_top_level_field_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            Settings(completely_unknown_field="oops")  # type: ignore[call-arg]

    def test_unknown_nested_field_raises_validation_error(self) -> None:
        """A typo like 'db_paht' is caught rather than silently using the default."""
        with pytest.raises(ValidationError):
            StoreSettings(db_paht="/intended/path/depreview.db")  # type: ignore[call-arg]
