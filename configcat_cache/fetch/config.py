"""Construction options for a configuration fetcher."""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from configcat_cache.fetch.constants import (
    DEFAULT_MODE,
    DEFAULT_TIMEOUT_SECONDS,
    PROXY_SCHEMES,
    SDK_KEY_VISIBLE_CHARS,
)
from configcat_cache.fetch.models import DataGovernance


class FetcherOptions(BaseModel):
    """Options for a single configuration fetcher.

    One fetcher serves one SDK key. Providing ``base_url`` marks the
    fetcher as using a custom endpoint, which then takes precedence over
    data governance routing and over non-forced server redirects.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sdk_key: Annotated[str, Field(min_length=1, description="Configuration namespace")]
    base_url: str | None = Field(default=None, description="Custom endpoint")
    data_governance: DataGovernance = DataGovernance.GLOBAL
    http_proxy: str | None = Field(default=None, description="Proxy URL")
    mode: Annotated[str, Field(min_length=1, max_length=16)] = DEFAULT_MODE
    name: str | None = Field(default=None, description="Logical instance name")
    timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )

    @field_validator("sdk_key")
    @classmethod
    def validate_sdk_key(cls, v: str) -> str:
        """Reject SDK keys that would alter the request path."""
        stripped = v.strip()
        if not stripped:
            msg = "sdk_key must not be blank"
            raise ValueError(msg)
        if any(ch in stripped for ch in "?#\\ "):
            msg = "sdk_key contains characters not allowed in a URL path"
            raise ValueError(msg)
        return stripped

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str | None) -> str | None:
        """Require an absolute http(s) URL and drop any trailing slash."""
        if v is None:
            return None
        value = v.strip()
        if not value.startswith(("http://", "https://")):
            msg = f"Expected an http(s) URL, got {value!r}"
            raise ValueError(msg)
        return value.rstrip("/")

    @field_validator("http_proxy")
    @classmethod
    def validate_http_proxy(cls, v: str | None) -> str | None:
        """Require a proxy URL with a scheme httpx can route through."""
        if v is None:
            return None
        value = v.strip()
        if not value.startswith(PROXY_SCHEMES):
            msg = f"Unsupported proxy URL {value!r}"
            raise ValueError(msg)
        return value.rstrip("/")

    @model_validator(mode="before")
    @classmethod
    def default_name(cls, data: Any) -> Any:
        """Derive a log-safe instance name from the SDK key when none given."""
        if isinstance(data, dict) and not data.get("name"):
            sdk_key = data.get("sdk_key")
            if isinstance(sdk_key, str):
                suffix = sdk_key.strip()[-SDK_KEY_VISIBLE_CHARS:]
                data = {**data, "name": f"fetcher-{suffix}"}
        return data

    @property
    def custom_endpoint(self) -> bool:
        """Whether the caller supplied an explicit base URL."""
        return self.base_url is not None
