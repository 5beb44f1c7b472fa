"""
Tests for environment-driven settings.
"""

import pytest
from pathlib import Path

from bills_tracker.config import get_settings, validate_all_settings
from bills_tracker.config.settings import AppSettings, StorageSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run each test from an empty directory with no BILLS_ variables."""
    monkeypatch.chdir(tmp_path)
    for name in [
        "BILLS_STORAGE_DATA_DIR",
        "BILLS_STORAGE_FILE_NAME",
        "BILLS_STORAGE_EXPENSES_KEY",
        "BILLS_LOG_LEVEL",
        "BILLS_DUE_SOON_DAYS",
        "BILLS_PRESET_CATEGORIES",
    ]:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestStorageSettings:
    """Tests for StorageSettings."""

    def test_defaults(self):
        """Test the store lives in ~/.bills_tracker under bills_v2."""
        settings = StorageSettings()
        assert settings.store_path == Path.home() / ".bills_tracker" / "store.json"
        assert settings.expenses_key == "bills_v2"

    def test_env_override(self, monkeypatch, tmp_path):
        """Test the data directory can be moved with an env variable."""
        monkeypatch.setenv("BILLS_STORAGE_DATA_DIR", str(tmp_path / "data"))
        assert StorageSettings().store_path == tmp_path / "data" / "store.json"

    def test_file_name_must_be_bare(self, monkeypatch):
        """Test a path in file_name is rejected."""
        monkeypatch.setenv("BILLS_STORAGE_FILE_NAME", "../store.json")
        with pytest.raises(ValueError):
            StorageSettings()


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self):
        """Test default presets and due-soon window."""
        settings = AppSettings()
        assert settings.due_soon_days == 3
        assert settings.preset_categories_list == [
            "Rent", "Utilities", "Internet", "Phone", "Food", "Transport", "Other",
        ]

    def test_log_level_is_case_insensitive(self, monkeypatch):
        """Test lowercase log levels are accepted."""
        monkeypatch.setenv("BILLS_LOG_LEVEL", "debug")
        assert AppSettings().log_level == "DEBUG"

    def test_preset_list_skips_blanks(self, monkeypatch):
        """Test extra commas and spaces in the preset list are ignored."""
        monkeypatch.setenv("BILLS_PRESET_CATEGORIES", " Rent, ,Gym,")
        assert AppSettings().preset_categories_list == ["Rent", "Gym"]

    def test_validate_all_reports_errors(self, monkeypatch):
        """Test invalid settings are reported instead of raised."""
        monkeypatch.setenv("BILLS_DUE_SOON_DAYS", "90")
        status = validate_all_settings()
        assert status["storage"] is True
        assert status["app"] is False
        assert "due_soon_days" in status["app_error"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
