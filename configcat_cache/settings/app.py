"""Application settings powered by Pydantic BaseSettings."""

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from configcat_cache.fetch.config import FetcherOptions
from configcat_cache.fetch.constants import DEFAULT_TIMEOUT_SECONDS
from configcat_cache.fetch.models import DataGovernance


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    sdk_key: str | None = Field(default=None, validation_alias="CONFIGCAT_SDK_KEY")
    base_url: str | None = Field(default=None, validation_alias="CONFIGCAT_BASE_URL")
    data_governance: DataGovernance = Field(
        default=DataGovernance.GLOBAL, validation_alias="CONFIGCAT_DATA_GOVERNANCE"
    )
    http_proxy: str | None = Field(
        default=None, validation_alias="CONFIGCAT_HTTP_PROXY"
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, validation_alias="CONFIGCAT_TIMEOUT_SECONDS"
    )

    def fetcher_options(self, **overrides: Any) -> FetcherOptions:
        """Build fetcher options from settings.

        Overrides whose value is None fall back to the settings value.

        Args:
            **overrides: FetcherOptions fields taking precedence.

        Returns:
            Validated fetcher options.
        """
        values: dict[str, Any] = {
            "sdk_key": self.sdk_key,
            "base_url": self.base_url,
            "data_governance": self.data_governance,
            "http_proxy": self.http_proxy,
            "timeout_seconds": self.timeout_seconds,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return FetcherOptions(**values)


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
