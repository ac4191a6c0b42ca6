"""
core/target_normalizer.py
Turns a raw user string into a validated URL with an explicit port.

Accepts:
  "cloudflare.com"              → https://cloudflare.com:443
  "example.org:8443"            → https://example.org:8443
  "http://neverssl.com"         → http://neverssl.com:80
  "https://1.1.1.1/path"        → https://1.1.1.1:443/path
  "[2606:4700::1111]"           → https://[2606:4700::1111]:443

Rejects (before any network activity):
  "", "localhost", "bad host!!\">AAAA", "-bad-.com", "a..b", "x.com:99999"
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from utils.constants import DEFAULT_HTTP_PORT, DEFAULT_HTTPS_PORT, PORT_MIN, PORT_MAX
from utils.validators import is_valid_hostname


# ─── Custom Exceptions ────────────────────────────────────────────────────────

class TargetValidationError(ValueError):
    """Raised when a target cannot be turned into a scannable URL."""


# ─── Result ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class NormalizedTarget:
    scheme: str
    host:   str
    port:   int
    url:    str          # absolute URL with explicit port

    def plain_http_port(self, override_port: Optional[int] = None) -> int:
        """Port for the plaintext HTTP/1.0 probe: the override, else 80."""
        return override_port or DEFAULT_HTTP_PORT


# ─── Normalizer ───────────────────────────────────────────────────────────────

class TargetNormalizer:
    """
    Normalize hostname / host:port / URL input.

    Port precedence: explicit override > URL-embedded > scheme default
    (80 for http, 443 otherwise). localhost is refused; this tool scans
    network-visible hosts only.
    """

    # ── Public API ────────────────────────────────────────────────────────────

    def normalize(self, raw: str, override_port: Optional[int] = None) -> NormalizedTarget:
        """Raises TargetValidationError on any invalid input."""
        if not isinstance(raw, str):
            raise TargetValidationError(f"expected string, got {type(raw).__name__}")

        if not raw.startswith("http://") and not raw.startswith("https://"):
            raw = "https://" + raw

        try:
            parts = urlsplit(raw)
            embedded_port = parts.port
        except ValueError as exc:
            raise TargetValidationError(str(exc)) from exc

        scheme = parts.scheme or "https"
        if not parts.netloc:
            raise TargetValidationError("missing host in URL")

        host = parts.hostname or ""
        if not host:
            raise TargetValidationError("missing host in URL")

        if host.lower() == "localhost":
            raise TargetValidationError("localhost is not allowed as a scan target")

        if not _is_ip(host) and not is_valid_hostname(host):
            raise TargetValidationError("invalid domain name in URL")

        if override_port is not None:
            if not (PORT_MIN <= override_port <= PORT_MAX):
                raise TargetValidationError(
                    f"port {override_port} out of valid range [{PORT_MIN}, {PORT_MAX}]"
                )
            port = override_port
        elif embedded_port is not None:
            port = embedded_port
        else:
            port = DEFAULT_HTTP_PORT if scheme == "http" else DEFAULT_HTTPS_PORT

        url = urlunsplit((
            scheme, join_host_port(host, port), parts.path, parts.query, parts.fragment,
        ))
        return NormalizedTarget(scheme=scheme, host=host, port=port, url=url)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _is_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        return False


def join_host_port(host: str, port: int) -> str:
    """host:port, with IPv6 literals bracketed."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


# ── Module-level convenience ──────────────────────────────────────────────────

_default_normalizer = TargetNormalizer()


def normalize_target(raw: str, override_port: Optional[int] = None) -> NormalizedTarget:
    return _default_normalizer.normalize(raw, override_port)
