"""
httpver Constants & Enums
Protocol labels, probe timeouts, scheduler and cache limits.
"""

from enum import Enum


# ─── Protocol labels (fixed report order) ────────────────────────────────────
class HttpVersion(str, Enum):
    HTTP_1_0 = "HTTP/1.0"
    HTTP_1_1 = "HTTP/1.1"
    HTTP_2_0 = "HTTP/2.0"
    HTTP_3_0 = "HTTP/3.0"
    ERROR    = "error"     # input-validation sentinel


PROBE_ORDER = (
    HttpVersion.HTTP_1_0,
    HttpVersion.HTTP_1_1,
    HttpVersion.HTTP_2_0,
    HttpVersion.HTTP_3_0,
)


# ─── Probe timeouts (seconds, total per probe) ───────────────────────────────
PROBE_TIMEOUTS = {
    HttpVersion.HTTP_1_0: 2.0,
    HttpVersion.HTTP_1_1: 2.0,
    HttpVersion.HTTP_2_0: 2.0,
    HttpVersion.HTTP_3_0: 3.0,
}

USER_AGENT = "httpver/1.0 (+protocol support check)"


# ─── Ports ───────────────────────────────────────────────────────────────────
PORT_MIN           = 1
PORT_MAX           = 65535
DEFAULT_HTTP_PORT  = 80
DEFAULT_HTTPS_PORT = 443


# ─── Hostname limits (RFC 1035) ──────────────────────────────────────────────
HOSTNAME_MAX_LEN = 253
LABEL_MAX_LEN    = 63


# ─── TLS version labels (ssl.SSLObject.version() → report string) ─────────────
TLS_VERSION_NAMES = {
    "TLSv1.3": "TLS 1.3",
    "TLSv1.2": "TLS 1.2",
    "TLSv1.1": "TLS 1.1",
    "TLSv1":   "TLS 1.0",
}


# ─── Scheduler ───────────────────────────────────────────────────────────────
WORKERS_PER_CPU = 4
MAX_WORKERS     = 64


# ─── Result cache ────────────────────────────────────────────────────────────
CACHE_TTL_HOURS = 4
MAX_RECENT_KEYS = 32


# ─── Web front end ───────────────────────────────────────────────────────────
MAX_WEB_TARGETS       = 5
RECENT_LIMIT          = 12
SHOWCASE_LIMIT        = 6    # best / worst lists
EVIDENCE_MAX_LEN      = 500


# ─── Layering Contract (hard import rules - enforced by tests) ───────────────
# core      → may import: utils
# cache     → may import: core, utils
# reporting → may import: core, utils
# dashboard → may import: cache, core, reporting, utils
# NEVER: core imports cache, dashboard or reporting
