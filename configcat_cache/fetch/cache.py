"""Entity tag revalidation for configuration fetches.

Encapsulates all cache-related logic for conditional requests (ETag).
The document itself is retained by the caller; only the validator lives here.
"""

from collections.abc import Mapping

from configcat_cache.fetch.constants import HEADER_ETAG, HEADER_IF_NONE_MATCH
from configcat_cache.fetch.models import FetchState, HttpResponse
from configcat_cache.observability.logging import get_logger


logger = get_logger(__name__)


class RevalidationCache:
    """Builds conditional headers and folds responses into fetch state.

    Handles:
    - Building the If-None-Match header from the stored entity tag
    - Storing the entity tag of a 2xx response
    - Preserving the stored entity tag on 304 and on failures
    """

    def __init__(self, name: str) -> None:
        """Initialize the revalidation cache.

        Args:
            name: Fetcher instance name for logging.
        """
        self._log = logger.bind(component="cache", fetcher=name)

    def conditional_headers(self, state: FetchState) -> dict[str, str]:
        """Get conditional request headers for the stored entity tag.

        Args:
            state: Current fetch state.

        Returns:
            Dictionary with If-None-Match, or empty if no tag is stored.
        """
        if state.etag is None:
            return {}
        self._log.debug("cache_lookup", has_etag=True)
        return {HEADER_IF_NONE_MATCH: state.etag}

    @staticmethod
    def extract_etag(headers: Mapping[str, str]) -> str | None:
        """Find the ETag header regardless of its case.

        Args:
            headers: Response headers.

        Returns:
            Header value, or None if absent.
        """
        wanted = HEADER_ETAG.lower()
        for key, value in headers.items():
            if key.lower() == wanted:
                return value
        return None

    def apply(self, state: FetchState, response: HttpResponse | None) -> FetchState:
        """Fold a response into the fetch state.

        Only a 2xx response replaces the entity tag, including with None when
        the server sent none. 304 keeps the existing tag. A missing response
        (transport failure) or an error status leaves the state untouched.

        Args:
            state: State the request was made with.
            response: Response received, or None on transport failure.

        Returns:
            The updated state.
        """
        if response is None or not response.is_success:
            return state

        etag = self.extract_etag(response.headers)
        self._log.debug(
            "cache_update",
            status_code=response.status_code,
            etag_changed=etag != state.etag,
        )
        return state.with_etag(etag)
