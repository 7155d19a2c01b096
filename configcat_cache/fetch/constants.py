"""Constants for the configuration fetch layer.

Centralizes origins, wire keys, and HTTP status values shared across modules.
"""

# Regional origins
BASE_URL_GLOBAL = "https://cdn-global.configcat.com"
BASE_URL_EU_ONLY = "https://cdn-eu.configcat.com"

# Request path pieces: {base_url}/{BASE_PATH}/{sdk_key}/{CONFIG_FILENAME}
BASE_PATH = "configuration-files"
CONFIG_FILENAME = "config_v5.json"

# Config document wire keys
PREFERENCES = "p"
PREFERENCES_BASE_URL = "u"
REDIRECT = "r"

# Long-form aliases accepted alongside the compact wire keys
PREFERENCES_ALIASES = (PREFERENCES, "preferences")
PREFERENCES_BASE_URL_ALIASES = (PREFERENCES_BASE_URL, "redirectBaseUrl")
REDIRECT_ALIASES = (REDIRECT, "redirectMode")

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_NOT_MODIFIED = 304

# Request headers
HEADER_USER_AGENT = "User-Agent"
HEADER_CONFIGCAT_USER_AGENT = "X-ConfigCat-UserAgent"
HEADER_IF_NONE_MATCH = "If-None-Match"
HEADER_ETAG = "ETag"

PRODUCT_NAME = "ConfigCat-Python"
DEFAULT_MODE = "m"
DEFAULT_TIMEOUT_SECONDS = 30.0

# Proxy URL schemes accepted by httpx; socks needs the httpx[socks] extra
PROXY_SCHEMES = ("http://", "https://", "socks5://", "socks5h://")

# Redirected attempts allowed per fetch call
MAX_REDIRECT_HOPS = 1

# Trailing characters of the SDK key left visible in logs
SDK_KEY_VISIBLE_CHARS = 6

DATA_GOVERNANCE_DASHBOARD_URL = (
    "https://app.configcat.com/organization/data-governance"
)
SDK_KEY_DASHBOARD_URL = "https://app.configcat.com/sdkkey"
