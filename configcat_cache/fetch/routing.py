"""Base URL routing for configuration fetches.

Reconciles three signals into the origin used for the next request:
- a caller-supplied custom endpoint
- the caller's data governance region
- the redirect preference advertised by the server in the last document
"""

from dataclasses import dataclass

from configcat_cache.fetch.constants import BASE_URL_EU_ONLY, BASE_URL_GLOBAL
from configcat_cache.fetch.models import (
    DataGovernance,
    FetchState,
    Preferences,
    RedirectMode,
)


@dataclass(frozen=True)
class RoutingDecision:
    """Outcome of evaluating redirect policy against one response.

    Attributes:
        base_url: Origin to use for subsequent requests.
        redirect: True if the response must be discarded in favour of an
            attempt against ``base_url``.
        advisory: True if the server reports the declared data governance
            region is out of sync with the dashboard preference.
    """

    base_url: str
    redirect: bool = False
    advisory: bool = False


def initial_base_url(
    custom_base_url: str | None,
    data_governance: DataGovernance,
) -> str:
    """Choose the origin for the very first request.

    Args:
        custom_base_url: Caller-supplied endpoint, if any.
        data_governance: Caller-declared region.

    Returns:
        Base URL without trailing slash.
    """
    if custom_base_url:
        return custom_base_url.rstrip("/")
    if data_governance == DataGovernance.EU_ONLY:
        return BASE_URL_EU_ONLY
    return BASE_URL_GLOBAL


def resolve_redirect(state: FetchState, preferences: Preferences) -> RoutingDecision:
    """Apply redirect policy to a successful response.

    A custom endpoint wins over server guidance unless the server forces
    the redirect. Otherwise any advertised base URL that differs from the
    one just used is adopted and triggers a redirected attempt.

    Args:
        state: State the response was fetched with.
        preferences: Preferences read from the response document.

    Returns:
        The routing decision for this response.
    """
    mode = preferences.redirect_mode
    advisory = mode == RedirectMode.SHOULD_REDIRECT
    target = preferences.redirect_base_url
    current = state.base_url

    if state.custom_endpoint and mode != RedirectMode.FORCE_REDIRECT:
        return RoutingDecision(base_url=current, advisory=advisory)

    if target and _normalize(target) != _normalize(current):
        return RoutingDecision(
            base_url=_normalize(target), redirect=True, advisory=advisory
        )

    return RoutingDecision(base_url=current, advisory=advisory)


def _normalize(url: str) -> str:
    return url.strip().rstrip("/")
