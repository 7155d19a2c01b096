"""Unit tests for fetcher construction options."""

import pytest
from pydantic import ValidationError

from configcat_cache.fetch.config import FetcherOptions
from configcat_cache.fetch.models import DataGovernance
from tests.helpers.fetching import CUSTOM_URL, SDK_KEY


class TestFetcherOptions:
    """Tests for FetcherOptions validation."""

    def test_defaults(self) -> None:
        """Test default option values."""
        options = FetcherOptions(sdk_key=SDK_KEY)

        assert options.base_url is None
        assert options.custom_endpoint is False
        assert options.data_governance == DataGovernance.GLOBAL
        assert options.http_proxy is None
        assert options.mode == "m"
        assert options.timeout_seconds == 30.0

    def test_default_name_from_key_suffix(self) -> None:
        """Test the derived instance name shows only the key suffix."""
        options = FetcherOptions(sdk_key=SDK_KEY)

        assert options.name == f"fetcher-{SDK_KEY[-6:]}"

    def test_explicit_name(self) -> None:
        """Test that an explicit name is kept."""
        assert FetcherOptions(sdk_key=SDK_KEY, name="main").name == "main"

    def test_custom_endpoint(self) -> None:
        """Test that a base URL marks a custom endpoint and drops the slash."""
        options = FetcherOptions(sdk_key=SDK_KEY, base_url=f" {CUSTOM_URL}/ ")

        assert options.base_url == CUSTOM_URL
        assert options.custom_endpoint is True

    def test_data_governance_from_string(self) -> None:
        """Test region parsing from its string value."""
        options = FetcherOptions(sdk_key=SDK_KEY, data_governance="eu_only")

        assert options.data_governance == DataGovernance.EU_ONLY

    @pytest.mark.parametrize("sdk_key", ["", "   ", "key with space", "key?x=1"])
    def test_invalid_sdk_key(self, sdk_key: str) -> None:
        """Test that blank or path-breaking SDK keys are rejected."""
        with pytest.raises(ValidationError):
            FetcherOptions(sdk_key=sdk_key)

    @pytest.mark.parametrize("field", ["base_url", "http_proxy"])
    def test_non_http_urls_rejected(self, field: str) -> None:
        """Test that endpoint and proxy must be http(s) URLs."""
        with pytest.raises(ValidationError):
            FetcherOptions(sdk_key=SDK_KEY, **{field: "ftp://example.com"})

    @pytest.mark.parametrize(
        "proxy",
        ["http://proxy.local:3128", "https://proxy.local", "socks5://proxy.local:1080"],
    )
    def test_supported_proxy_schemes(self, proxy: str) -> None:
        """Test that http, https and socks proxies are accepted."""
        options = FetcherOptions(sdk_key=SDK_KEY, http_proxy=proxy)

        assert options.http_proxy == proxy

    def test_socks_proxy_not_a_base_url(self) -> None:
        """Test that a socks URL is still rejected as a custom endpoint."""
        with pytest.raises(ValidationError):
            FetcherOptions(sdk_key=SDK_KEY, base_url="socks5://proxy.local:1080")

    def test_unknown_option_rejected(self) -> None:
        """Test that unknown options are rejected."""
        with pytest.raises(ValidationError):
            FetcherOptions(sdk_key=SDK_KEY, retries=3)  # type: ignore[call-arg]

    def test_frozen(self) -> None:
        """Test that options cannot be changed after construction."""
        options = FetcherOptions(sdk_key=SDK_KEY)

        with pytest.raises(ValidationError):
            options.sdk_key = "other"  # type: ignore[misc]
