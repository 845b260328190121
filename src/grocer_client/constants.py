"""
Project-wide constants for the grocery storefront client
"""  # noqa: D200, D212, D415

# ==============================================================================
# Response Envelope
# ==============================================================================

OK_CODE = 1000  # envelope code for a successful call
SESSION_EXPIRED_CODE = 3005  # access credential expired, renewal required

# ==============================================================================
# Session Endpoints
# ==============================================================================

REFRESH_PATH = "/auth/refresh"
LOGOUT_PATH = "/auth/logout"
LOGIN_PATH = "/login"

# ==============================================================================
# API and Network Configuration
# ==============================================================================

DEFAULT_BASE_URL = "http://localhost:8081/api"
NETWORK_TIMEOUT = 30.0  # seconds
DEFAULT_HEADERS = {"Content-Type": "application/json"}

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})
