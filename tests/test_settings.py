"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from expense_tracker.config import (
    AppSettings,
    FirestoreSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmp_path):
    """Run each test from an empty directory so no .env file is picked up."""
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAppSettings:
    def test_defaults(self):
        settings = AppSettings()
        assert settings.store_backend == "firestore"
        assert settings.log_level == "INFO"
        assert settings.refresh_interval_seconds == 1.0
        assert settings.is_development is True
        assert set(AppSettings.model_fields) == {
            "environment", "log_level", "store_backend", "refresh_interval_seconds",
        }

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("APP_STORE_BACKEND", "memory")
        monkeypatch.setenv("APP_LOG_LEVEL", "debug")
        monkeypatch.setenv("APP_REFRESH_INTERVAL_SECONDS", "2.5")

        settings = AppSettings()

        assert settings.store_backend == "memory"
        assert settings.log_level == "DEBUG"
        assert settings.refresh_interval_seconds == 2.5

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("APP_STORE_BACKEND", "sqlite")
        with pytest.raises(ValidationError):
            AppSettings()

    def test_unknown_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("APP_LOG_LEVEL", "loud")
        with pytest.raises(ValidationError):
            AppSettings()

    def test_env_file_is_read(self, tmp_path):
        (tmp_path / ".env").write_text("APP_STORE_BACKEND=memory\n")
        assert AppSettings().store_backend == "memory"


class TestFirestoreSettings:
    def test_defaults(self):
        settings = FirestoreSettings()
        assert settings.collection_name == "items"
        assert settings.credentials_path is None

    def test_missing_credentials_file_warns(self, tmp_path):
        with pytest.warns(UserWarning, match="credentials file not found"):
            FirestoreSettings(credentials_path=str(tmp_path / "missing.json"))


class TestValidateAllSettings:
    def test_all_valid(self):
        results = validate_all_settings()
        assert results["firestore"] is True
        assert results["app"] is True

    def test_invalid_app_settings_reported(self, monkeypatch):
        monkeypatch.setenv("APP_STORE_BACKEND", "sqlite")
        results = validate_all_settings()
        assert results["app"] is False
        assert "app_error" in results
