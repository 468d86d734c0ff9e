"""Constants for Kaktus Monitor."""

from __future__ import annotations

VERSION = "0.3.0"

DEFAULT_CONFIG_PATH = "secrets.yaml"

# Portal
PORTAL_BASE_URL = "https://www.mujkaktus.cz"
DASHBOARD_PATH = "/moje-sluzby"
RECDEF_PATH = "/delegate/recdef"
LOGIN_PATH = "/.gang/login"

# Liferay portlet parameters for lazy-loaded dashboard islands
ISLAND_QUERY_PARAMS = {
    "p_p_id": "rkaktusvcc_WAR_vcc",
    "p_p_lifecycle": "0",
    "p_p_state": "exclusive",
    "p_p_mode": "view",
    "p_p_col_id": "column-1",
    "p_p_col_count": "1",
    "_rkaktusvcc_WAR_vcc_moduleCode": "dashboard",
    "_rkaktusvcc_WAR_vcc_lazyLoading": "true",
}
ISLAND_COMPONENT_IDS_PARAM = "_rkaktusvcc_WAR_vcc_componentIds"

ISLAND_MARKER_ATTR = "data-lazy-loading"
ISLAND_REQUEST_KEY = "rk"
PORTLET_ROOT_SELECTOR = ".portlet-body"

DEFAULT_TIMEOUT = 10  # seconds, per request
DEFAULT_POLL_ATTEMPTS = 10
DEFAULT_POLL_DELAY = 0.05  # seconds between re-polls of a pending island

# Island titles (lowercase substrings)
CREDIT_ISLAND_LABEL = "kredit"
TARIFF_ISLAND_LABEL = "balíč"

# Router
DEFAULT_ROUTER_PORT = 8728
DEFAULT_ROUTER_TIMEOUT = 5
LTE_INTERFACE_NUMBER = 0
# RouterOS API breaks on attribute words longer than 127 bytes, so keep
# well under the real 160 character SMS limit.
MAX_SMS_LENGTH = 110
