"""Unit tests for environment-driven settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from configcat_cache.fetch.models import DataGovernance
from configcat_cache.settings import AppSettings, get_settings
from tests.helpers.fetching import CUSTOM_URL, SDK_KEY


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove ConfigCat variables and keep .env files out of reach."""
    for name in (
        "CONFIGCAT_SDK_KEY",
        "CONFIGCAT_BASE_URL",
        "CONFIGCAT_DATA_GOVERNANCE",
        "CONFIGCAT_HTTP_PROXY",
        "CONFIGCAT_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self) -> None:
        """Test settings with an empty environment."""
        settings = get_settings()

        assert settings.sdk_key is None
        assert settings.base_url is None
        assert settings.data_governance == DataGovernance.GLOBAL
        assert settings.timeout_seconds == 30.0

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that CONFIGCAT_* variables are read."""
        monkeypatch.setenv("CONFIGCAT_SDK_KEY", SDK_KEY)
        monkeypatch.setenv("CONFIGCAT_BASE_URL", CUSTOM_URL)
        monkeypatch.setenv("CONFIGCAT_DATA_GOVERNANCE", "eu_only")
        monkeypatch.setenv("CONFIGCAT_TIMEOUT_SECONDS", "5")

        settings = AppSettings()

        assert settings.sdk_key == SDK_KEY
        assert settings.base_url == CUSTOM_URL
        assert settings.data_governance == DataGovernance.EU_ONLY
        assert settings.timeout_seconds == 5.0

    def test_reads_dotenv(self) -> None:
        """Test that a .env file in the working directory is read."""
        Path(".env").write_text(f"CONFIGCAT_SDK_KEY={SDK_KEY}\n", encoding="utf-8")

        assert AppSettings().sdk_key == SDK_KEY


class TestFetcherOptionsFromSettings:
    """Tests for building fetcher options from settings."""

    def test_settings_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test options built purely from the environment."""
        monkeypatch.setenv("CONFIGCAT_SDK_KEY", SDK_KEY)
        monkeypatch.setenv("CONFIGCAT_DATA_GOVERNANCE", "eu_only")

        options = AppSettings().fetcher_options()

        assert options.sdk_key == SDK_KEY
        assert options.data_governance == DataGovernance.EU_ONLY
        assert options.custom_endpoint is False

    def test_overrides_win_and_none_falls_back(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that explicit overrides beat settings and None does not."""
        monkeypatch.setenv("CONFIGCAT_SDK_KEY", SDK_KEY)
        monkeypatch.setenv("CONFIGCAT_BASE_URL", CUSTOM_URL)

        options = AppSettings().fetcher_options(sdk_key="other-key", base_url=None)

        assert options.sdk_key == "other-key"
        assert options.base_url == CUSTOM_URL

    def test_missing_sdk_key(self) -> None:
        """Test that options cannot be built without an SDK key."""
        with pytest.raises(ValidationError):
            AppSettings().fetcher_options()
